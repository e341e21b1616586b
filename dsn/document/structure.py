from collections import namedtuple

from utils import pmts


# Positions are expressed in "model offsets": every character counts as 1, and so does every inline widget.
Position = namedtuple('Position', ('block', 'offset'))


class TextRun(object):
    """A maximal piece of text in a block which shares a single set of attributes (e.g. {'bold': True})."""

    def __init__(self, data, attributes=None):
        pmts(data, str)
        self.data = data
        self.attributes = dict(attributes or {})

    def __len__(self):
        return len(self.data)

    def __repr__(self):
        if self.attributes:
            return "TextRun(%r, %r)" % (self.data, self.attributes)
        return "TextRun(%r)" % self.data


class InlineWidget(object):
    """Non-textual content inside a block (an inline image, a mention chip...). It has no textual data."""

    data = None

    def __init__(self, name):
        self.name = name

    def __len__(self):
        return 1

    def __repr__(self):
        return "InlineWidget(%r)" % self.name


class Block(object):

    def __init__(self, children=None):
        self.children = list(children or [])

    def __len__(self):
        return sum(len(child) for child in self.children)

    def __repr__(self):
        return "Block(%r)" % self.children

    def text_offset(self, offset):
        """Translates a model offset into an offset in the block's concatenated text (widgets don't count)."""
        result = 0
        for child in self.children:
            if offset <= 0:
                break

            if isinstance(child, TextRun):
                result += min(offset, len(child))

            offset -= len(child)

        return result


class DocumentStructure(object):

    def __init__(self, blocks, anchor, focus):
        pmts(anchor, Position)
        pmts(focus, Position)
        self.blocks = blocks
        self.anchor = anchor
        self.focus = focus

    @property
    def is_collapsed(self):
        return self.anchor == self.focus

    def selection_range(self):
        """(start, end) of the selection in document order."""
        return min(self.anchor, self.focus), max(self.anchor, self.focus)

    def check_position(self, position):
        if not (0 <= position.block < len(self.blocks)):
            raise IndexError("No such block: %s" % position.block)

        if not (0 <= position.offset <= len(self.blocks[position.block])):
            raise IndexError("Offset out of bounds: %s" % (position,))


def explode(block):
    """Splits a block's children into single items: 1-character TextRuns and widgets."""
    result = []
    for child in block.children:
        if isinstance(child, TextRun):
            result.extend(TextRun(c, child.attributes) for c in child.data)
        else:
            result.append(child)
    return result


def implode(items):
    """The inverse of explode: merges adjacent TextRuns with equal attributes."""
    children = []
    for item in items:
        if (isinstance(item, TextRun) and children and isinstance(children[-1], TextRun) and
                children[-1].attributes == item.attributes):
            children[-1] = TextRun(children[-1].data + item.data, item.attributes)
        else:
            children.append(item)
    return Block(children)


def blocks_from_texts(texts):
    return [Block([TextRun(text)] if text else []) for text in texts]
