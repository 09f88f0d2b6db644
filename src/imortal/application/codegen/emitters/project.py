"""Project-level files emitted once per run, after every node file."""

from __future__ import annotations

from imortal import __version__
from imortal.application.codegen.base import (
    GeneratedFile,
    GeneratedProject,
    GeneratorConfig,
    env_vars,
)
from imortal.application.codegen.naming import to_snake_case
from imortal.application.codegen.templates import TemplateRenderer
from imortal.application.components.definition import BuiltinComponent
from imortal.domain.enums import FileType
from imortal.domain.graph import ProjectGraph

BASE_SETTINGS = ("APP_NAME", "DEBUG", "SECRET_KEY")
ROUTER_DIRS = ("app/handlers/", "app/auth/")
SUBPACKAGES = ("models", "queries", "handlers", "auth", "logic")
BASE_REQUIREMENTS = (
    "fastapi>=0.110",
    "uvicorn>=0.27",
    "pydantic>=2.5",
    "pydantic-settings>=2.1",
)


def environment_variables(graph: ProjectGraph) -> list[str]:
    """``${VAR}`` names used by node config values, first use first."""
    seen: dict[str, None] = {}
    for node in graph.nodes():
        for value in node.config.values():
            for name in env_vars(value):
                seen.setdefault(name, None)
    return list(seen)


def router_modules(project: GeneratedProject) -> list[dict[str, str]]:
    """Handler modules exposing a ``router``, aliased by their package."""
    routers = []
    for generated in project.files.values():
        if generated.file_type is FileType.HANDLER and generated.path.startswith(ROUTER_DIRS):
            package, _, module = generated.path.removesuffix(".py").rpartition("/")
            parent = package.rsplit("/", 1)[-1]
            routers.append(
                {
                    "package": package.replace("/", "."),
                    "module": module,
                    "alias": f"{parent}_{module}",
                }
            )
    return routers


def requirements(graph: ProjectGraph) -> list[str]:
    extra = []
    caches = graph.nodes_by_type(BuiltinComponent.STORAGE_CACHE.value)
    if any(n.get_config_str("backend") == "redis" for n in caches):
        extra.append("redis>=5.0")
    return [*BASE_REQUIREMENTS, *extra]


def project_files(
    graph: ProjectGraph,
    project: GeneratedProject,
    config: GeneratorConfig,
    renderer: TemplateRenderer,
) -> list[GeneratedFile]:
    variables = environment_variables(graph)
    settings = [v for v in variables if v not in BASE_SETTINGS]
    routers = router_modules(project)
    name = graph.meta.name
    common = {
        "project": name,
        "description": graph.meta.description,
        "version": graph.meta.version,
        "generator_version": __version__,
    }

    files: list[GeneratedFile] = [
        GeneratedFile(
            "app/__init__.py",
            renderer.render("package_init.py.j2", title=name, **common),
            FileType.MODULE,
        )
    ]
    for package in SUBPACKAGES:
        prefix = f"app/{package}/"
        if any(path.startswith(prefix) for path in project.files):
            files.append(
                GeneratedFile(
                    f"{prefix}__init__.py",
                    renderer.render("package_init.py.j2", title=f"{name} {package}", **common),
                    FileType.MODULE,
                )
            )

    files += [
        GeneratedFile(
            "app/config.py",
            renderer.render(
                "config.py.j2",
                app_name=to_snake_case(name),
                settings=[v.lower() for v in settings],
                **common,
            ),
            FileType.CONFIG,
        ),
        GeneratedFile("app/store.py", renderer.render("store.py.j2", **common), FileType.MODULE),
        GeneratedFile(
            "app/security.py", renderer.render("security.py.j2", **common), FileType.MODULE
        ),
        GeneratedFile(
            "app/main.py",
            renderer.render(
                "main.py.j2",
                routers=routers,
                **common,
            ),
            FileType.MODULE,
        ),
        GeneratedFile(
            "requirements.txt",
            renderer.render("requirements.txt.j2", requirements=requirements(graph)),
            FileType.CONFIG,
        ),
        GeneratedFile(
            ".env.example",
            renderer.render(
                "env.example.j2",
                app_name=to_snake_case(name),
                variables=settings,
                **common,
            ),
            FileType.CONFIG,
        ),
        GeneratedFile(
            "README.md",
            renderer.render(
                "readme.md.j2",
                paths=project.paths(),
                routers=routers,
                migrations=[p for p in project.paths() if p.startswith("migrations/")],
                backend=config.database_backend.value,
                **common,
            ),
            FileType.CONFIG,
        ),
    ]
    return files
