"""Capture of pre-write filesystem state for every target path.

Snapshots are taken for the whole batch before the first write so that a
later revert sees one consistent "before" view, and never needs to re-read
a filesystem that has changed since.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from md_apply.interfaces.filesystem import FileSystem
from md_apply.models.blocks import CodeBlock
from md_apply.models.results import WriteOperation
from md_apply.utils.async_helpers import gather_keyed
from md_apply.utils.logging import LogEventNames

log = structlog.get_logger()


async def capture_original_state(
    fs: FileSystem,
    block: CodeBlock,
    encoding: str,
) -> WriteOperation:
    """Snapshot one target path.

    A path whose existence cannot be determined is treated like an existing
    file that could not be read, so revert will never delete it.

    Args:
        fs: Filesystem to inspect
        block: Block about to be written
        encoding: Text encoding used for the read

    Returns:
        WriteOperation describing the path before any write
    """
    path = block.file_path

    try:
        exists = await fs.path_exists(path)
    except OSError as e:
        log.warning(LogEventNames.STATE_UNREADABLE, path=path, error=str(e))
        return WriteOperation(block=block, original_content=None, originally_existed=True)

    if not exists:
        log.debug(LogEventNames.STATE_CAPTURED, path=path, existed=False)
        return WriteOperation(block=block, original_content=None, originally_existed=False)

    try:
        content = await fs.read_text(path, encoding)
    except (OSError, UnicodeDecodeError) as e:
        log.warning(LogEventNames.STATE_UNREADABLE, path=path, error=str(e))
        return WriteOperation(block=block, original_content=None, originally_existed=True)

    log.debug(LogEventNames.STATE_CAPTURED, path=path, existed=True, length=len(content))
    return WriteOperation(block=block, original_content=content, originally_existed=True)


async def capture_original_states(
    fs: FileSystem,
    blocks: Sequence[CodeBlock],
    encoding: str,
) -> tuple[WriteOperation, ...]:
    """Snapshot every target path concurrently.

    Args:
        fs: Filesystem to inspect
        blocks: Blocks about to be written, in document order

    Returns:
        One WriteOperation per block, in block order
    """

    async def capture(indexed: tuple[int, CodeBlock]) -> WriteOperation:
        return await capture_original_state(fs, indexed[1], encoding)

    by_index = await gather_keyed(enumerate(blocks), key=lambda item: item[0], worker=capture)
    return tuple(by_index[i] for i in range(len(blocks)))
