"""
A TextInput which shows, while you type, whom you may want to mention.

Usage: python gui.py [NAME ...]
"""
from sys import argv

from kivy.app import App
from kivy.config import Config
from kivy.logger import Logger
from kivy.uix.gridlayout import GridLayout
from kivy.uix.label import Label
from kivy.uix.textinput import TextInput

from mention import filter_feed, mention_callbacks
from textwatcher import MATCHED, TextWatcher, UNMATCHED

from widgets.textinput import TextInputDocument

DEFAULT_FEED = ['@Barney', '@Lily', '@Marshall', '@Robin', '@Ted']

Config.set('kivy', 'exit_on_escape', '0')


class MentionGUI(App):

    def __init__(self, feed):
        super(MentionGUI, self).__init__()
        self.feed = feed

    def build(self):
        layout = GridLayout(spacing=10, cols=1)

        self.text_input = TextInput(size_hint=(1, .8))
        self.feed_label = Label(size_hint=(1, .2))

        layout.add_widget(self.text_input)
        layout.add_widget(self.feed_label)

        self.document = TextInputDocument(self.text_input)

        test_callback, match_callback = mention_callbacks('@')
        self.watcher = TextWatcher(self.document, test_callback, match_callback)
        self.watcher.subscribe(MATCHED, self.show_feed)
        self.watcher.subscribe(UNMATCHED, self.hide_feed)

        self.text_input.focus = True
        return layout

    def show_feed(self, match):
        items = filter_feed(self.feed, match.matched.feed_text)
        Logger.info("MentionGUI: %d item(s) for %r" % (len(items), match.matched.feed_text))
        self.feed_label.text = '  '.join(items) if items else '(nobody)'

    def hide_feed(self):
        self.feed_label.text = ''

    def on_stop(self):
        self.watcher.close()
        self.document.close()


def main():
    feed = ['@' + name for name in argv[1:]] or DEFAULT_FEED
    MentionGUI(feed).run()


if __name__ == "__main__":
    main()
