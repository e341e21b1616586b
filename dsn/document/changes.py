"""
Vocabulary of the notifications a document broadcasts to its listeners.

Selection changes carry a single flag: `direct_change` is True when the selection was explicitly moved (by the user or
programmatically), and False when the caret merely followed an edit.

Document changes are broadcast once per batch; a batch has a `kind` and the ordered list of ChangeEntry objects that
describe its atomic edits.
"""

from collections import namedtuple

# Batch kinds. Transparent batches are internal bookkeeping and should not be observed as user-visible edits.
DEFAULT = 'default'
TRANSPARENT = 'transparent'
REMOTE = 'remote'

# Entry types
INSERT = 'insert'
REMOVE = 'remove'
ATTRIBUTE = 'attribute'

# What an entry affects
TEXT = 'text'
WIDGET = 'widget'
BLOCK = 'block'


SelectionChange = namedtuple('SelectionChange', ('direct_change',))

ChangeBatch = namedtuple('ChangeBatch', ('kind', 'entries'))

ChangeEntry = namedtuple('ChangeEntry', ('type', 'affects', 'length'))
