"""
Mentions: the typical use of a TextWatcher. A mention is triggered by a marker (e.g. '@') that is typed at the start
of a word; the text typed after it is the "feed text" used to look up the things that can be mentioned.

>>> test_callback, match_callback = mention_callbacks('@')
>>> test_callback('Hello @')
True
>>> match_callback('Hello @')
MentionMatch(marker='@', feed_text='')
>>> match_callback('Hello @jo')
MentionMatch(marker='@', feed_text='jo')

The marker must start a word; and once a space is typed the mention is over:

>>> test_callback('mail@example'), test_callback('Hello @jo '), test_callback(None)
(False, False, False)

A minimal number of characters may be required:

>>> test_callback, match_callback = mention_callbacks('#', min_chars=2)
>>> test_callback('(#a'), test_callback('(#ab')
(False, True)
"""

import re

from collections import namedtuple

# Characters which may precede a marker, besides whitespace and the start of the text
OPENING_PUNCTUATION = '([{"\''

MentionMatch = namedtuple('MentionMatch', ('marker', 'feed_text'))


def create_mention_pattern(marker, min_chars=0):
    return re.compile(
        r'(?:^|[\s%s])(%s)(\w{%d,})$' % (re.escape(OPENING_PUNCTUATION), re.escape(marker), min_chars))


def mention_callbacks(marker='@', min_chars=0):
    """Returns (test_callback, match_callback), to be passed to a TextWatcher."""
    pattern = create_mention_pattern(marker, min_chars)

    def test_callback(text):
        return text is not None and pattern.search(text) is not None

    def match_callback(text):
        match = pattern.search(text)
        return MentionMatch(match.group(1), match.group(2))

    return test_callback, match_callback


def filter_feed(feed, feed_text, limit=10):
    """The items of `feed` (each starting with its marker) whose name starts with feed_text, ignoring case.

    >>> filter_feed(['@Barney', '@lily', '@marshall', '@Ted'], 'l')
    ['@lily']
    >>> filter_feed(['@Barney', '@lily', '@marshall', '@Ted'], '', limit=2)
    ['@Barney', '@lily']
    """
    result = []
    for item in feed:
        if item[1:].lower().startswith(feed_text.lower()):
            result.append(item)

        if len(result) == limit:
            break

    return result
