"""
DSN means: "domain specific nerf"

Each subpackage applies the same pattern to a single structure:

* a structure
* a Clef (set of notes that operate on that structure)
* construct_... / ..._play to play the notes onto the structure

For now there is only one such structure: the document that text watchers observe (dsn.document). It is a list of
blocks (paragraphs), each holding text runs and inline widgets, plus a selection:

* structure.py: the (immutable) document structure
* clef.py: the notes (edits) that can be played on it
* construct.py: playing a single note, which yields a new structure and a description of what changed
* model.py: TextDocument, which plays batches of notes and broadcasts the resulting notifications
* changes.py: the vocabulary of those notifications
"""
