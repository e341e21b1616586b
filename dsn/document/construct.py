from dsn.document.changes import (
    ATTRIBUTE,
    BLOCK,
    ChangeEntry,
    INSERT,
    REMOVE,
    TEXT,
    WIDGET,
)

from dsn.document.clef import (
    DeleteBackward,
    DeleteSelection,
    InsertText,
    InsertWidget,
    SetAttribute,
    SetSelection,
    SplitBlock,
)

from dsn.document.structure import (
    DocumentStructure,
    explode,
    implode,
    InlineWidget,
    Position,
    TextRun,
)


def document_note_play(structure, note):
    # :: DocumentStructure, DocumentNote => (new) DocumentStructure, [ChangeEntry]

    if isinstance(note, SetSelection):
        structure.check_position(note.anchor)
        structure.check_position(note.focus)
        return DocumentStructure(structure.blocks, note.anchor, note.focus), []

    if isinstance(note, DeleteSelection):
        return _delete_selection(structure)

    if isinstance(note, DeleteBackward):
        if not structure.is_collapsed:
            # backspace on a selection removes the selection, and nothing more
            return _delete_selection(structure)

        caret = structure.focus
        items = explode(structure.blocks[caret.block])

        start = max(0, caret.offset - note.count)
        removed = items[start:caret.offset]
        del items[start:caret.offset]

        return (
            _with_block(structure, caret.block, items, Position(caret.block, start)),
            _entries_for_items(REMOVE, removed),
        )

    if isinstance(note, InsertText):
        structure, entries = _delete_selection(structure)
        if note.text == '':
            return structure, entries

        caret = structure.focus
        items = explode(structure.blocks[caret.block])

        attributes = note.attributes
        if attributes is None:
            # typing continues the formatting of the text before the caret
            before = items[caret.offset - 1] if caret.offset > 0 else None
            attributes = before.attributes if isinstance(before, TextRun) else {}

        items[caret.offset:caret.offset] = [TextRun(c, attributes) for c in note.text]

        return (
            _with_block(structure, caret.block, items, Position(caret.block, caret.offset + len(note.text))),
            entries + [ChangeEntry(INSERT, TEXT, len(note.text))],
        )

    if isinstance(note, InsertWidget):
        structure, entries = _delete_selection(structure)

        caret = structure.focus
        items = explode(structure.blocks[caret.block])
        items.insert(caret.offset, InlineWidget(note.name))

        return (
            _with_block(structure, caret.block, items, Position(caret.block, caret.offset + 1)),
            entries + [ChangeEntry(INSERT, WIDGET, 1)],
        )

    if isinstance(note, SplitBlock):
        structure, entries = _delete_selection(structure)

        caret = structure.focus
        items = explode(structure.blocks[caret.block])

        blocks = structure.blocks[:]
        blocks[caret.block:caret.block + 1] = [implode(items[:caret.offset]), implode(items[caret.offset:])]
        new_caret = Position(caret.block + 1, 0)

        return DocumentStructure(blocks, new_caret, new_caret), entries + [ChangeEntry(INSERT, BLOCK, 1)]

    if isinstance(note, SetAttribute):
        if structure.is_collapsed:
            return structure, []

        start, end = _single_block_range(structure)
        items = explode(structure.blocks[start.block])

        formatted_count = 0
        for index in range(start.offset, end.offset):
            item = items[index]
            if isinstance(item, TextRun):
                attributes = dict(item.attributes)
                attributes[note.key] = note.value
                items[index] = TextRun(item.data, attributes)
                formatted_count += 1

        blocks = structure.blocks[:]
        blocks[start.block] = implode(items)

        entries = [ChangeEntry(ATTRIBUTE, TEXT, formatted_count)] if formatted_count else []
        return DocumentStructure(blocks, structure.anchor, structure.focus), entries

    raise Exception("Unknown Note")


def _single_block_range(structure):
    start, end = structure.selection_range()
    if start.block != end.block:
        raise ValueError("Selections spanning multiple blocks are not supported: %s - %s" % (start, end))
    return start, end


def _delete_selection(structure):
    if structure.is_collapsed:
        return structure, []

    start, end = _single_block_range(structure)
    items = explode(structure.blocks[start.block])

    removed = items[start.offset:end.offset]
    del items[start.offset:end.offset]

    return _with_block(structure, start.block, items, start), _entries_for_items(REMOVE, removed)


def _with_block(structure, block_index, items, caret):
    blocks = structure.blocks[:]
    blocks[block_index] = implode(items)
    return DocumentStructure(blocks, caret, caret)


def _entries_for_items(type_, items):
    """One entry per consecutive group of items of the same kind (text or widgets)."""
    entries = []
    for item in items:
        affects = TEXT if isinstance(item, TextRun) else WIDGET
        if entries and entries[-1].affects == affects:
            entries[-1] = ChangeEntry(type_, affects, entries[-1].length + 1)
        else:
            entries.append(ChangeEntry(type_, affects, 1))
    return entries
