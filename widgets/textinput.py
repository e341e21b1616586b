from collections import namedtuple

from kivy.clock import Clock
from kivy.logger import Logger

from channel import Channel

from dsn.document.changes import (
    BLOCK,
    ChangeBatch,
    ChangeEntry,
    DEFAULT,
    INSERT,
    REMOVE,
    SelectionChange,
    TEXT,
)

# A paragraph of the TextInput's text: text[start:end], not including the newline that ends it
Paragraph = namedtuple('Paragraph', ('start', 'end'))


def diff_entries(old, new):
    """Describes the change from `old` to `new` as (at most) a removal followed by an insertion.

    >>> diff_entries('Hello', 'Hello!')
    [ChangeEntry(type='insert', affects='text', length=1)]
    >>> diff_entries('Hello', 'Help')
    [ChangeEntry(type='remove', affects='text', length=2), ChangeEntry(type='insert', affects='text', length=1)]
    >>> diff_entries('Hello', 'Hel\\nlo')
    [ChangeEntry(type='insert', affects='block', length=1)]
    """
    prefix = 0
    while prefix < min(len(old), len(new)) and old[prefix] == new[prefix]:
        prefix += 1

    suffix = 0
    while suffix < min(len(old), len(new)) - prefix and old[-1 - suffix] == new[-1 - suffix]:
        suffix += 1

    removed = len(old) - prefix - suffix
    inserted = new[prefix:len(new) - suffix]

    entries = []
    if removed > 0:
        entries.append(ChangeEntry(REMOVE, TEXT, removed))

    if inserted == '\n':
        # Enter starts a new paragraph; that's not typing
        entries.append(ChangeEntry(INSERT, BLOCK, 1))
    elif inserted:
        entries.append(ChangeEntry(INSERT, TEXT, len(inserted)))

    return entries


class TextInputDocument(object):
    """
    Presents a kivy TextInput as a document that can be watched.

    Kivy does not tell us why the cursor moved, nor in which order the `text` and `cursor` properties of a TextInput
    change while typing. So we collect what happened until the next frame and decide then: if the text changed, the
    cursor (if it moved at all) followed the edit, which makes it an indirect selection change followed by a single
    ChangeBatch. If only the cursor moved, it's a direct selection change.
    """

    def __init__(self, text_input):
        self.text_input = text_input

        self.selection_channel = Channel()
        self.change_channel = Channel()

        self._text = text_input.text
        self._pending_entries = []
        self._selection_moved = False
        self._invalidated = False

        text_input.bind(
            text=self._on_text,
            cursor=self._on_selection,
            selection_text=self._on_selection,
        )

    def close(self):
        self.text_input.unbind(
            text=self._on_text,
            cursor=self._on_selection,
            selection_text=self._on_selection,
        )

    # ## The interface used by listeners (e.g. TextWatcher)
    def on_selection_change(self, receive):
        return self.selection_channel.connect(receive)

    def on_document_change(self, receive):
        return self.change_channel.connect(receive)

    def is_selection_collapsed(self):
        return self.text_input.selection_text == ''

    def caret_block(self):
        text = self.text_input.text
        index = self.text_input.cursor_index()

        start = text.rfind('\n', 0, index) + 1
        end = text.find('\n', index)
        return Paragraph(start, len(text) if end == -1 else end)

    def caret_offset(self):
        return self.text_input.cursor_index() - self.caret_block().start

    def block_children_text(self, block):
        return [self.text_input.text[block.start:block.end]]

    # ## Receiving from kivy
    def _on_text(self, instance, value):
        self._pending_entries.extend(diff_entries(self._text, value))
        self._text = value
        self.invalidate()

    def _on_selection(self, instance, value):
        self._selection_moved = True
        self.invalidate()

    def invalidate(self, *args):
        if not self._invalidated:
            Clock.schedule_once(self.flush, -1)
            self._invalidated = True

    def flush(self, *args):
        """Broadcasts what happened since the last flush."""
        self._invalidated = False

        entries, self._pending_entries = self._pending_entries, []
        selection_moved, self._selection_moved = self._selection_moved, False

        if not entries:
            if selection_moved:
                self.selection_channel.broadcast(SelectionChange(True))
            return

        Logger.debug("TextInputDocument: broadcasting %s" % (entries,))

        if selection_moved:
            self.selection_channel.broadcast(SelectionChange(False))

        self.change_channel.broadcast(ChangeBatch(DEFAULT, entries))
