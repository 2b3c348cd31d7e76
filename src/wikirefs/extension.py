"""Register the update command, pre-save hook and status annotations."""

import logging
from collections.abc import Callable

from .refs.formatting import resolve_active
from .refs.status import StatusEvaluator
from .refs.sync import SyncResult, SynchronizationEngine
from .workspace import MARKDOWN, Annotation, TextDocument, WillSaveEvent, Workspace

logger = logging.getLogger(__name__)

UPDATE_COMMAND = "wikirefs.update-wikilinks"


def activate(
    workspace: Workspace,
    engine: SynchronizationEngine,
    evaluator: StatusEvaluator,
) -> list[Callable[[], None]]:
    """Wire the reference block features into ``workspace``.

    Returns the callables that undo each registration.
    """

    async def update_reference_list() -> SyncResult | None:
        document = workspace.active_document
        if document is None or document.language_id != MARKDOWN:
            logger.debug("No active markdown document, nothing to update")
            return None
        return await engine.synchronize(document, resolve_active(workspace))

    def on_will_save(event: WillSaveEvent) -> None:
        if event.document.language_id == MARKDOWN:
            event.wait_until(engine.synchronize(event.document))

    async def provide_annotations(document: TextDocument) -> list[Annotation]:
        status = await evaluator.evaluate(document)
        if status is None:
            return []
        return [Annotation(range=status.range, title=status.title)]

    return [
        workspace.register_command(UPDATE_COMMAND, update_reference_list),
        workspace.on_will_save(on_will_save),
        workspace.register_annotation_provider(MARKDOWN, provide_annotations),
    ]
