import os
import unittest
import doctest

# kivy parses sys.argv on import unless told otherwise; the test runner's arguments are not kivy's.
os.environ.setdefault('KIVY_NO_ARGS', '1')

from kivy.event import EventDispatcher  # noqa: E402
from kivy.properties import ObjectProperty, StringProperty  # noqa: E402

import channel  # noqa: E402
import mention  # noqa: E402
import textwatcher  # noqa: E402
import utils  # noqa: E402

from channel import Channel  # noqa: E402

from dsn.document.changes import ChangeBatch, ChangeEntry, SelectionChange, TRANSPARENT  # noqa: E402
from dsn.document.clef import InsertText, InsertWidget, SetAttribute, SplitBlock  # noqa: E402
from dsn.document.model import TextDocument  # noqa: E402
from dsn.document.structure import Position  # noqa: E402

from textwatcher import (  # noqa: E402
    CollaboratorContractViolation,
    InvalidConfiguration,
    MATCHED,
    TextWatcher,
    UNMATCHED,
)

from widgets import textinput  # noqa: E402
from widgets.textinput import TextInputDocument  # noqa: E402


def load_tests(loader, tests, ignore):
    # Test the docstrings inside our actual codebase
    tests.addTests(doctest.DocTestSuite(utils))
    tests.addTests(doctest.DocTestSuite(channel))
    tests.addTests(doctest.DocTestSuite(mention))
    tests.addTests(doctest.DocTestSuite(textwatcher))
    tests.addTests(doctest.DocTestSuite(textinput))

    # Some tests in the doctests style are too large to nicely fit into a docstring; better to keep them separate:
    tests.addTests(doctest.DocFileSuite("doctests/document.txt"))
    tests.addTests(doctest.DocFileSuite("doctests/text_watcher.txt"))

    return tests


class Switch(object):
    """A test_callback whose answer is set by the test; it counts how often (and with what) it is called."""

    def __init__(self, answer=True):
        self.answer = answer
        self.calls = []

    def __call__(self, text):
        self.calls.append(text)
        return self.answer


class StubDocument(object):
    """A document which reports whatever the test tells it to."""

    def __init__(self, children_text, offset, collapsed=True):
        self.children_text = children_text
        self.offset = offset
        self.collapsed = collapsed

        self.selection_channel = Channel()
        self.change_channel = Channel()

    def on_selection_change(self, receive):
        return self.selection_channel.connect(receive)

    def on_document_change(self, receive):
        return self.change_channel.connect(receive)

    def is_selection_collapsed(self):
        return self.collapsed

    def caret_block(self):
        return 'the block'

    def caret_offset(self):
        return self.offset

    def block_children_text(self, block):
        return self.children_text

    def move_caret(self, direct_change=True):
        self.selection_channel.broadcast(SelectionChange(direct_change))


class Recorder(object):

    def __init__(self, watcher):
        self.events = []
        watcher.subscribe(MATCHED, lambda match: self.events.append((MATCHED, match.text, match.matched)))
        watcher.subscribe(UNMATCHED, lambda: self.events.append((UNMATCHED,)))


class ConfigurationTestCase(unittest.TestCase):

    def test_document_is_required(self):
        with self.assertRaises(InvalidConfiguration):
            TextWatcher(None, Switch(), str)

    def test_callbacks_must_be_callable(self):
        document = TextDocument()

        with self.assertRaises(InvalidConfiguration):
            TextWatcher(document, 'not callable', str)

        with self.assertRaises(InvalidConfiguration):
            TextWatcher(document, Switch(), None)

        # nothing was left listening
        self.assertEqual(0, len(document.selection_channel))
        self.assertEqual(0, len(document.change_channel))

    def test_unknown_event_kind(self):
        watcher = TextWatcher(TextDocument(), Switch(), str)
        with self.assertRaises(ValueError):
            watcher.subscribe('changed', print)


class GatingTestCase(unittest.TestCase):

    def setUp(self):
        self.document = TextDocument(['Hello'], Position(0, 5))
        self.switch = Switch(True)
        self.watcher = TextWatcher(self.document, self.switch, str)

    def test_typing_is_evaluated(self):
        self.document.type('!')
        self.assertEqual(['Hello!'], self.switch.calls)

    def test_batch_of_multiple_entries_is_not_evaluated(self):
        self.document.change([InsertText('a'), InsertText('b')])
        self.document.change([InsertWidget('smiley'), InsertText('c')])
        self.assertEqual([], self.switch.calls)

    def test_entry_of_multiple_characters_is_not_evaluated(self):
        self.document.change([InsertText('ab')])
        self.assertEqual([], self.switch.calls)

    def test_transparent_batch_is_not_evaluated(self):
        self.document.type('a', kind=TRANSPARENT)
        self.document.change_channel.broadcast(ChangeBatch(TRANSPARENT, [ChangeEntry('insert', 'text', 1)]))
        self.assertEqual([], self.switch.calls)

    def test_non_text_entry_is_not_evaluated(self):
        self.document.change([InsertWidget('smiley')])
        self.document.change([SplitBlock()])
        self.assertEqual([], self.switch.calls)

    def test_formatting_is_not_evaluated(self):
        self.document.set_selection(Position(0, 0), Position(0, 1))
        self.document.change([SetAttribute('bold', True)])
        self.assertEqual([None], self.switch.calls)

    def test_indirect_selection_change_is_not_evaluated(self):
        self.document.selection_channel.broadcast(SelectionChange(False))
        self.assertEqual([], self.switch.calls)

    def test_direct_selection_change_is_evaluated(self):
        self.document.set_selection(Position(0, 2))
        self.assertEqual(['He'], self.switch.calls)

    def test_non_collapsed_selection_has_no_text(self):
        self.document.set_selection(Position(0, 1), Position(0, 4))
        self.assertEqual([None], self.switch.calls)
        self.assertIsNone(self.watcher.last)
        self.assertFalse(self.watcher.has_match)


class TransitionTestCase(unittest.TestCase):

    def setUp(self):
        self.document = StubDocument(['Hello'], 5)
        self.switch = Switch(False)
        self.watcher = TextWatcher(self.document, self.switch, lambda text: text.upper())
        self.recorder = Recorder(self.watcher)

    def test_no_unmatched_without_a_preceding_match(self):
        for i in range(3):
            self.document.move_caret()

        self.assertEqual([], self.recorder.events)
        self.assertFalse(self.watcher.has_match)

    def test_matched_on_each_qualifying_evaluation(self):
        self.switch.answer = True
        self.document.move_caret()
        self.document.offset = 4
        self.document.move_caret()
        self.document.offset = 3
        self.document.move_caret()

        self.assertEqual([
            (MATCHED, 'Hello', 'HELLO'),
            (MATCHED, 'Hell', 'HELL'),
            (MATCHED, 'Hel', 'HEL'),
        ], self.recorder.events)

    def test_unmatched_only_once(self):
        self.switch.answer = True
        self.document.move_caret()

        self.switch.answer = False
        for i in range(3):
            self.document.move_caret()

        self.switch.answer = True
        self.document.move_caret()

        self.switch.answer = False
        self.document.move_caret()

        self.assertEqual([MATCHED, UNMATCHED, MATCHED, UNMATCHED], [e[0] for e in self.recorder.events])

    def test_no_caret_means_no_match(self):
        # even if test_callback accepts the absence of text
        self.switch.answer = True
        self.document.collapsed = False
        self.document.move_caret()

        self.assertEqual([None], self.switch.calls)
        self.assertEqual([], self.recorder.events)
        self.assertFalse(self.watcher.has_match)

    def test_widgets_contribute_no_text(self):
        self.document.children_text = ['ab', None, 'c']
        self.document.offset = 3
        self.assertEqual('abc', self.watcher.last)

    def test_empty_block(self):
        self.document.children_text = []
        self.document.offset = 0
        self.assertEqual('', self.watcher.last)

    def test_caret_outside_of_block(self):
        self.document.offset = 6
        with self.assertRaises(CollaboratorContractViolation):
            self.watcher.last

        with self.assertRaises(CollaboratorContractViolation):
            self.document.move_caret()

        self.assertEqual([], self.switch.calls)

    def test_failing_test_callback_leaves_state_alone(self):
        self.switch.answer = True
        self.document.move_caret()

        def failing(text):
            raise RuntimeError("test_callback failed")

        self.watcher.test_callback = failing
        with self.assertRaises(RuntimeError):
            self.document.move_caret()

        self.assertTrue(self.watcher.has_match)

    def test_failing_match_callback_leaves_state_alone(self):
        self.switch.answer = True

        def failing(text):
            raise RuntimeError("match_callback failed")

        self.watcher.match_callback = failing
        with self.assertRaises(RuntimeError):
            self.document.move_caret()

        self.assertFalse(self.watcher.has_match)
        self.assertEqual([], self.recorder.events)

    def test_failing_subscriber_leaves_state_alone(self):
        self.switch.answer = True
        self.document.move_caret()

        def failing():
            raise RuntimeError("subscriber failed")

        self.watcher.subscribe(UNMATCHED, failing)

        self.switch.answer = False
        with self.assertRaises(RuntimeError):
            self.document.move_caret()

        self.assertTrue(self.watcher.has_match)


class LifecycleTestCase(unittest.TestCase):

    def test_unsubscribe(self):
        document = StubDocument(['Hello'], 5)
        watcher = TextWatcher(document, Switch(True), str)

        matches = []
        connection = watcher.subscribe(MATCHED, matches.append)
        document.move_caret()
        watcher.unsubscribe(connection)
        document.move_caret()

        self.assertEqual(1, len(matches))

    def test_close(self):
        document = TextDocument()
        switch = Switch(True)
        watcher = TextWatcher(document, switch, str)
        self.assertFalse(watcher.closed)

        watcher.close()
        watcher.close()

        document.type('a')
        document.set_selection(Position(0, 0))

        self.assertTrue(watcher.closed)
        self.assertEqual([], switch.calls)
        self.assertEqual(0, len(document.selection_channel))
        self.assertEqual(0, len(document.change_channel))

    def test_close_during_broadcast(self):
        document = TextDocument()
        closer = TextWatcher(document, Switch(True), str)
        switch = Switch(True)
        closed_one = TextWatcher(document, switch, str)

        closer.subscribe(MATCHED, lambda match: closed_one.close())
        document.type('x')

        self.assertTrue(closed_one.closed)
        self.assertEqual([], switch.calls)

    def test_failing_subscription_to_document_changes(self):
        class RefusingDocument(StubDocument):
            def on_document_change(self, receive):
                raise RuntimeError("no document changes today")

        document = RefusingDocument(['Hello'], 5)
        with self.assertRaises(RuntimeError):
            TextWatcher(document, Switch(True), str)

        self.assertEqual(0, len(document.selection_channel))

    def test_edits_made_by_subscribers_are_evaluated_afterwards(self):
        document = TextDocument()
        test_callback, match_callback = mention.mention_callbacks('@')
        watcher = TextWatcher(document, test_callback, match_callback)

        events = []

        def receive(match):
            events.append(('enter', match.text))
            if match.text.endswith('@'):
                document.type('x')
            events.append(('exit', match.text))

        watcher.subscribe(MATCHED, receive)
        document.type('@')

        self.assertEqual([('enter', '@'), ('exit', '@'), ('enter', '@x'), ('exit', '@x')], events)

    def test_typing_in_a_new_block(self):
        document = TextDocument(['abc'], Position(0, 3))
        switch = Switch(False)
        watcher = TextWatcher(document, switch, str)

        document.change([SplitBlock()])
        document.type('d')

        self.assertEqual(['d'], switch.calls)
        self.assertEqual('d', watcher.last)
        self.assertEqual(['abc', 'd'], document.texts())


class FakeTextInput(EventDispatcher):
    """Mimics the relevant parts of kivy's TextInput: text changes first, the cursor follows."""

    text = StringProperty('')
    cursor = ObjectProperty((0, 0))
    selection_text = StringProperty('')

    def cursor_index(self):
        col, row = self.cursor
        lines = self.text.split('\n')
        return sum(len(line) + 1 for line in lines[:row]) + col

    def get_cursor_from_index(self, index):
        lines = self.text[:index].split('\n')
        return len(lines[-1]), len(lines) - 1

    def insert_text(self, substring):
        index = self.cursor_index()
        self.text = self.text[:index] + substring + self.text[index:]
        self.cursor = self.get_cursor_from_index(index + len(substring))

    def do_backspace(self):
        index = self.cursor_index()
        self.text = self.text[:index - 1] + self.text[index:]
        self.cursor = self.get_cursor_from_index(index - 1)


class TextInputDocumentTestCase(unittest.TestCase):

    def setUp(self):
        self.text_input = FakeTextInput()
        self.document = TextInputDocument(self.text_input)

        test_callback, match_callback = mention.mention_callbacks('@')
        self.watcher = TextWatcher(self.document, test_callback, match_callback)
        self.recorder = Recorder(self.watcher)

    def tearDown(self):
        self.watcher.close()
        self.document.close()

    def type(self, text):
        for c in text:
            self.text_input.insert_text(c)
            self.document.flush()

    def test_typing(self):
        self.type('Hi @')
        self.type('b')
        self.text_input.do_backspace()
        self.document.flush()
        self.text_input.do_backspace()
        self.document.flush()

        self.assertEqual([
            (MATCHED, 'Hi @', mention.MentionMatch('@', '')),
            (MATCHED, 'Hi @b', mention.MentionMatch('@', 'b')),
            (MATCHED, 'Hi @', mention.MentionMatch('@', '')),
            (UNMATCHED,),
        ], self.recorder.events)

    def test_paragraphs(self):
        self.type('first @line')
        self.type('\n')
        self.type('@x')

        self.assertEqual('@x', self.watcher.last)
        self.assertEqual((MATCHED, '@x', mention.MentionMatch('@', 'x')), self.recorder.events[-1])

    def test_paste_is_not_evaluated(self):
        self.text_input.insert_text('Hi @bob')
        self.document.flush()

        self.assertEqual([], self.recorder.events)
        self.assertEqual('Hi @bob', self.watcher.last)

    def test_cursor_move_is_direct(self):
        self.text_input.insert_text('@bob and')
        self.document.flush()

        self.text_input.cursor = (4, 0)
        self.document.flush()

        self.assertEqual([(MATCHED, '@bob', mention.MentionMatch('@', 'bob'))], self.recorder.events)

    def test_selection(self):
        self.text_input.insert_text('@bob')
        self.document.flush()

        self.text_input.selection_text = 'bob'
        self.assertFalse(self.document.is_selection_collapsed())
        self.assertIsNone(self.watcher.last)

    def test_flush_without_changes(self):
        self.document.flush()
        self.assertEqual([], self.recorder.events)


if __name__ == '__main__':
    unittest.main()
