"""
Project Model
In-memory module registry and the project-level queries built on the chunk engine
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple
import logging

from .chunks import Chunk, compute_chunks
from .cycle_detector import CycleDetector, ProbeResult, would_create_cycle
from .errors import ProjectFormatError, UnknownNodeError
from .source_sets import SourceKind, create_source_set_graph

logger = logging.getLogger(__name__)


@dataclass
class Module:
    """Data model for a build module"""
    name: str
    dependencies: Tuple[str, ...] = ()
    production_dependencies: Optional[Tuple[str, ...]] = None
    source_kinds: Tuple[SourceKind, ...] = (SourceKind.PRODUCTION,)

    def has_sources(self, kind: SourceKind) -> bool:
        return kind in self.source_kinds


def _string_list(entry: Dict, key: str, default: Optional[List[str]]) -> Optional[List[str]]:
    """Read an optional list-of-strings field of a module entry"""
    if key not in entry:
        return default
    value = entry[key]
    if value is None and default is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ProjectFormatError(f"Module {entry['name']}: '{key}' must be a list of strings, got {value!r}")
    return value


@dataclass
class ModuleRegistry:
    """Ordered collection of modules, addressed by name"""
    modules: List[Module] = field(default_factory=list)

    def __post_init__(self):
        self._by_name: Dict[str, Module] = {}
        for module in self.modules:
            if module.name in self._by_name:
                raise ProjectFormatError(f"Duplicate module name: {module.name}")
            self._by_name[module.name] = module

    @classmethod
    def from_json(cls, content: str) -> 'ModuleRegistry':
        """Parse a project description in JSON form"""
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse project description: {e}")
            raise ProjectFormatError(f"Invalid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict) -> 'ModuleRegistry':
        """Build a registry from ``{"modules": [{"name": ..., "dependencies": [...]}, ...]}``"""
        if not isinstance(data, dict) or not isinstance(data.get('modules'), list):
            raise ProjectFormatError("Project description must contain a 'modules' list")

        modules = []
        for entry in data['modules']:
            if not isinstance(entry, dict) or not isinstance(entry.get('name'), str) or not entry['name']:
                raise ProjectFormatError(f"Module entry without a name: {entry!r}")
            name = entry['name']
            try:
                kinds = tuple(SourceKind(kind) for kind in _string_list(entry, 'sources', ['production']))
            except ValueError as e:
                raise ProjectFormatError(f"Module {name}: {e}") from e

            production_deps = _string_list(entry, 'production_dependencies', None)
            modules.append(Module(
                name=name,
                dependencies=tuple(_string_list(entry, 'dependencies', [])),
                production_dependencies=tuple(production_deps) if production_deps is not None else None,
                source_kinds=kinds,
            ))

        logger.info(f"Loaded project with {len(modules)} modules")
        return cls(modules)

    def get_modules(self) -> List[str]:
        return [module.name for module in self.modules]

    def get_module(self, name: str) -> Module:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownNodeError(name) from None

    def dependencies_of(self, name: str) -> Tuple[str, ...]:
        return self.get_module(name).dependencies

    def production_dependencies_of(self, name: str) -> Tuple[str, ...]:
        module = self.get_module(name)
        if module.production_dependencies is None:
            return module.dependencies
        return module.production_dependencies

    def has_sources(self, name: str, kind: SourceKind) -> bool:
        # dependencies may name modules that are not part of the project
        module = self._by_name.get(name)
        return module is not None and module.has_sources(kind)

    def detector(self) -> CycleDetector:
        return CycleDetector(self.get_modules(), self.dependencies_of)


def get_sorted_module_chunks(registry: ModuleRegistry, modules: Iterable[str]) -> List[Chunk]:
    """Chunks of the whole project in build order, keeping only those touching modules"""
    wanted = set(modules)
    return [chunk for chunk in registry.detector().sorted_chunks() if not chunk.node_set.isdisjoint(wanted)]


def sort_modules(registry: ModuleRegistry, modules: Iterable[str]) -> List[str]:
    """Reorder modules so that every module comes after the modules it depends on"""
    position = {}
    for index, chunk in enumerate(registry.detector().sorted_chunks()):
        for offset, name in enumerate(chunk.nodes):
            position[name] = (index, offset)

    modules = list(modules)
    for name in modules:
        if name not in position:
            raise UnknownNodeError(name)
    return sorted(modules, key=position.__getitem__)


def create_registry_source_set_graph(registry: ModuleRegistry):
    return create_source_set_graph(
        registry.get_modules(),
        registry.dependencies_of,
        registry.has_sources,
        production_dependencies_of=registry.production_dependencies_of,
    )


def get_cyclic_dependencies(registry: ModuleRegistry, modules: Iterable[str]) -> List[Chunk]:
    """Cyclic source set chunks involving any of modules"""
    wanted = set(modules)
    chunks = compute_chunks(create_registry_source_set_graph(registry))
    return [
        chunk for chunk in chunks
        if chunk.is_cyclic and any(source_set.module in wanted for source_set in chunk.nodes)
    ]


def adding_dependency_forms_circularity(registry: ModuleRegistry, current: str, to_depend_on: str) -> ProbeResult:
    """Check whether making current depend on to_depend_on would create a new cycle"""
    return would_create_cycle(registry.get_modules(), registry.dependencies_of, current, to_depend_on)
