"""
Text watcher: keeps an eye on the text before the caret, and tells its subscribers whether that text matches.

A TextWatcher is configured with 2 functions:

* a test_callback :: text => bool; text is None when the selection is not collapsed (there is no caret to look from)
* a match_callback :: text => whatever the subscribers are interested in; only called when test_callback is truthy

It listens to the document it's given, and re-evaluates the text before the caret on:

* direct selection changes (the caret was moved explicitly). Indirect ones (the caret following an edit) are left to:
* document changes which look like typing: a batch of a single change of a single character of text.

Other document changes (pasting, formatting, batches of multiple changes, transparent batches) are not evaluated.

Each evaluation broadcasts `matched` (with a Match) when the text matches, and that's on every evaluation while it
matches, not only when the match starts. `unmatched` on the other hand is broadcast only once: on the first evaluation
that no longer matches.
"""

import logging

from collections import namedtuple

from channel import Channel
from utils import text_of

from dsn.document.changes import ATTRIBUTE, TEXT, TRANSPARENT

logger = logging.getLogger(__name__)

MATCHED = 'matched'
UNMATCHED = 'unmatched'

Match = namedtuple('Match', ('text', 'matched'))


class TextWatcherError(Exception):
    pass


class InvalidConfiguration(TextWatcherError):
    pass


class CollaboratorContractViolation(TextWatcherError):
    """The document reported an inconsistent state, e.g. a caret outside of its own text."""
    pass


def is_typing_change(batch):
    """
    >>> from dsn.document.changes import ChangeBatch, ChangeEntry
    >>> is_typing_change(ChangeBatch('default', [ChangeEntry('insert', 'text', 1)]))
    True
    >>> is_typing_change(ChangeBatch('default', [ChangeEntry('insert', 'text', 5)]))
    False
    >>> is_typing_change(ChangeBatch('default', [ChangeEntry('remove', 'text', 1), ChangeEntry('insert', 'text', 1)]))
    False
    >>> is_typing_change(ChangeBatch('default', [ChangeEntry('attribute', 'text', 1)]))
    False
    """
    if len(batch.entries) != 1:
        return False

    entry = batch.entries[0]

    # Backspace has the same signature as typing a character; formatting a single character does not.
    return entry.affects == TEXT and entry.length == 1 and entry.type != ATTRIBUTE


class TextWatcher(object):

    def __init__(self, document, test_callback, match_callback):
        if document is None:
            raise InvalidConfiguration("A TextWatcher needs a document to watch")

        if not callable(test_callback):
            raise InvalidConfiguration("test_callback is not callable: %r" % (test_callback,))

        if not callable(match_callback):
            raise InvalidConfiguration("match_callback is not callable: %r" % (match_callback,))

        self.document = document
        self.test_callback = test_callback
        self.match_callback = match_callback

        self.has_match = False

        self._channels = {
            MATCHED: Channel(),
            UNMATCHED: Channel(),
        }

        self._document_connections = []
        self._start_listening()

    @property
    def last(self):
        """The current text before the caret (recalculated on each access; None if the selection is not collapsed)."""
        return self._get_text()

    @property
    def closed(self):
        return self._document_connections == []

    def subscribe(self, event_kind, receive):
        """Connects `receive` to MATCHED (called with a Match) or UNMATCHED (called without arguments)."""
        if event_kind not in self._channels:
            raise ValueError("Unknown event kind: %r" % (event_kind,))

        return self._channels[event_kind].connect(receive)

    def unsubscribe(self, connection):
        connection.disconnect()

    def close(self):
        """Stops listening to the document. Subscribers are kept, but will not hear from us anymore."""
        for connection in self._document_connections:
            connection.disconnect()

        self._document_connections = []

    def _start_listening(self):
        self._document_connections = [self.document.on_selection_change(self._receive_selection_change)]

        try:
            self._document_connections.append(self.document.on_document_change(self._receive_document_change))
        except Exception:
            # listen to both, or to neither
            self.close()
            raise

    def _receive_selection_change(self, selection_change):
        # The indirect changes (i.e. on typing) are handled in _receive_document_change.
        if not selection_change.direct_change:
            return

        self._evaluate_text_before_caret()

    def _receive_document_change(self, batch):
        if batch.kind == TRANSPARENT:
            return

        if not is_typing_change(batch):
            logger.debug("Not evaluating a batch of %d change(s): not typing", len(batch.entries))
            return

        self._evaluate_text_before_caret()

    def _evaluate_text_before_caret(self):
        text = self._get_text()

        # test_callback is called even without a caret (text is None); but without a caret there's never a match.
        text_has_match = self.test_callback(text) and text is not None

        if not text_has_match:
            if self.has_match:
                logger.debug("Text before caret no longer matches: %r", text)
                self._channels[UNMATCHED].broadcast()

            self.has_match = False
            return

        matched = self.match_callback(text)
        self._channels[MATCHED].broadcast(Match(text, matched))

        self.has_match = True

    def _get_text(self):
        document = self.document

        # Do nothing if selection is not collapsed.
        if not document.is_selection_collapsed():
            return None

        text = text_of(document.block_children_text(document.caret_block()))
        offset = document.caret_offset()

        if not (0 <= offset <= len(text)):
            raise CollaboratorContractViolation(
                "Caret offset %s is outside of the caret's block (text length %s)" % (offset, len(text)))

        return text[:offset]
