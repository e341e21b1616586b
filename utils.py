def pmts(v, type_):
    """Poor man's type system"""
    assert isinstance(v, type_), "Expected value of type '%s' but is type '%s'" % (type_.__name__, type(v).__name__)


def text_of(datas):
    """Concatenates the `data` of a block's children; children without textual data (None) contribute nothing.

    >>> text_of(['Hello ', None, 'world'])
    'Hello world'
    >>> text_of([])
    ''
    """
    return ''.join(data for data in datas if data is not None)
