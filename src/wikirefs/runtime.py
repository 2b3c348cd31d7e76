"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.fs_storage import FsStorage
from .adapters.markdown_parser import MarkdownParser
from .adapters.note_graph import InMemoryNoteGraph
from .adapters.yaml_codec import MarkdownNoteCodec, YamlFrontmatter
from .config import WikirefsConfig, load_config
from .core.vault import Vault
from .extension import activate
from .refs.generator import ReferenceListGenerator
from .refs.status import StatusEvaluator
from .refs.sync import SynchronizationEngine
from .workspace import Workspace


@dataclass
class Runtime:
    """Container for all wired components."""
    vault: Vault
    graph: InMemoryNoteGraph
    generator: ReferenceListGenerator
    engine: SynchronizationEngine
    evaluator: StatusEvaluator
    workspace: Workspace
    config: WikirefsConfig

    async def ensure_started(self) -> None:
        """Load the note graph once and wait until it is ready."""
        self.graph.start()
        await self.graph.ready.wait()


def build_vault(root: Path) -> Vault:
    storage = FsStorage(root)
    codec = MarkdownNoteCodec(YamlFrontmatter())
    parser = MarkdownParser()
    return Vault(storage, parser, codec)


def build_runtime(
    vault_path: Path | None = None,
    config_path: Path | None = None,
    config: WikirefsConfig | None = None,
) -> Runtime:
    """Build and wire all components for a vault."""
    if config is None:
        config = load_config(config_path=config_path, vault_path=vault_path)

    if vault_path is None:
        vault_path = config.vault.root

    vault = build_vault(vault_path)
    graph = InMemoryNoteGraph(vault)
    generator = ReferenceListGenerator(graph, graph.ready)
    engine = SynchronizationEngine(generator, on_empty=config.refs.on_empty)
    evaluator = StatusEvaluator(generator, on_empty=config.refs.on_empty)

    workspace = Workspace(vault_path, config.format)
    activate(workspace, engine, evaluator)

    return Runtime(
        vault=vault,
        graph=graph,
        generator=generator,
        engine=engine,
        evaluator=evaluator,
        workspace=workspace,
        config=config,
    )
