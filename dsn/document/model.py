import logging

from channel import Channel
from utils import text_of

from dsn.document.changes import ChangeBatch, DEFAULT, SelectionChange
from dsn.document.clef import InsertText, SetSelection
from dsn.document.construct import document_note_play
from dsn.document.structure import blocks_from_texts, DocumentStructure, Position

logger = logging.getLogger(__name__)


class TextDocument(object):
    """
    An in-memory document which broadcasts its changes on 2 channels: one for selection changes and one for document
    changes (a ChangeBatch per call to `change`).

    Calls to `change` made by a receiver while a batch is being broadcast are queued; they are played (and broadcast)
    only after the current batch's broadcast has completed, so that receivers always observe batches one at a time.
    """

    def __init__(self, texts=('',), caret=None):
        blocks = blocks_from_texts(texts)
        caret = Position(0, 0) if caret is None else caret

        self.structure = DocumentStructure(blocks, caret, caret)
        self.structure.check_position(caret)

        self.selection_channel = Channel()
        self.change_channel = Channel()

        self._queue = []
        self._dispatching = False

    # ## The interface used by listeners (e.g. TextWatcher)
    def on_selection_change(self, receive):
        return self.selection_channel.connect(receive)

    def on_document_change(self, receive):
        return self.change_channel.connect(receive)

    def is_selection_collapsed(self):
        return self.structure.is_collapsed

    def caret_block(self):
        return self.structure.blocks[self.structure.focus.block]

    def caret_offset(self):
        return self.caret_block().text_offset(self.structure.focus.offset)

    def block_children_text(self, block):
        return [child.data for child in block.children]

    # ## Editing
    def change(self, notes, kind=DEFAULT):
        """Plays `notes` as a single batch."""
        self._queue.append((list(notes), kind))

        if self._dispatching:
            logger.debug("Batch of kind %s queued: a batch is being broadcast", kind)
            return

        self._dispatching = True
        try:
            while self._queue:
                notes, kind = self._queue.pop(0)
                self._play_batch(notes, kind)
        finally:
            self._dispatching = False
            # a failing note or receiver discards the batches that were queued behind it
            self._queue = []

    def set_selection(self, anchor, focus=None):
        self.change([SetSelection(anchor, focus)])

    def type(self, text, kind=DEFAULT):
        """Types `text` one character at a time, i.e. one batch per keystroke."""
        for c in text:
            self.change([InsertText(c)], kind)

    def texts(self):
        return [text_of(self.block_children_text(block)) for block in self.structure.blocks]

    def _play_batch(self, notes, kind):
        before = self.structure

        structure = before
        entries = []
        for note in notes:
            structure, note_entries = document_note_play(structure, note)
            entries.extend(note_entries)

        self.structure = structure

        direct_change = any(isinstance(note, SetSelection) for note in notes)
        moved = (structure.anchor, structure.focus) != (before.anchor, before.focus)

        if direct_change or moved:
            self.selection_channel.broadcast(SelectionChange(direct_change))

        if entries:
            self.change_channel.broadcast(ChangeBatch(kind, entries))
