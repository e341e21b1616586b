"""
The vocabulary of edits on a document. Notes that work "at the caret" act on the current selection; notes are played
inside a batch (see TextDocument.change) and produce the ChangeEntries which listeners receive.
"""


class DocumentNote(object):
    pass


class InsertText(DocumentNote):
    """Inserts text at the caret; a non-collapsed selection is deleted first (like typing over a selection)."""

    def __init__(self, text, attributes=None):
        self.text = text
        self.attributes = attributes


class DeleteBackward(DocumentNote):
    """Backspace: deletes up to `count` items before the caret, not crossing the start of the block."""

    def __init__(self, count=1):
        self.count = count


class DeleteSelection(DocumentNote):
    pass


class SetAttribute(DocumentNote):
    """Formatting: sets an attribute on the selected text."""

    def __init__(self, key, value):
        self.key = key
        self.value = value


class SplitBlock(DocumentNote):
    """Enter: splits the block at the caret; the caret moves to the start of the new block."""
    pass


class InsertWidget(DocumentNote):

    def __init__(self, name):
        self.name = name


class SetSelection(DocumentNote):

    def __init__(self, anchor, focus=None):
        self.anchor = anchor
        self.focus = anchor if focus is None else focus
