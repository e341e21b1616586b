"""
Channels: the minimal observer mechanism used throughout.

A Channel keeps an ordered list of connected receivers; `broadcast` calls each of them synchronously, in the order in
which they were connected. Connecting returns a Connection, which is the handle needed to disconnect again.

>>> channel = Channel()
>>> received = []
>>> connection = channel.connect(received.append)
>>> channel.broadcast('a')
>>> connection.disconnect()
>>> channel.broadcast('b')
>>> received
['a']

Receivers are called in registration order; a receiver which disconnects during a broadcast does not disturb the
broadcast that is in progress.

>>> channel = Channel()
>>> calls = []
>>> first = channel.connect(lambda: (calls.append('first'), first.disconnect()))
>>> second = channel.connect(lambda: calls.append('second'))
>>> channel.broadcast()
>>> channel.broadcast()
>>> calls
['first', 'second', 'second']

A receiver which is disconnected by an earlier receiver of the same broadcast does not receive it anymore:

>>> channel = Channel()
>>> calls = []
>>> first = channel.connect(lambda: (calls.append('first'), second.disconnect()))
>>> second = channel.connect(lambda: calls.append('second'))
>>> channel.broadcast()
>>> calls
['first']

Disconnecting is idempotent:

>>> first.disconnect()
>>> first.disconnect()
>>> len(channel)
0
"""


class Connection(object):

    def __init__(self, channel, receive):
        self.channel = channel
        self.receive = receive

    def disconnect(self):
        self.channel.disconnect(self)


class Channel(object):

    def __init__(self):
        self._connections = []

    def __len__(self):
        return len(self._connections)

    def connect(self, receive):
        connection = Connection(self, receive)
        self._connections.append(connection)
        return connection

    def disconnect(self, connection):
        if connection in self._connections:
            self._connections.remove(connection)

    def broadcast(self, *args):
        # iterate over a copy: receivers may (dis)connect while being notified
        for connection in self._connections[:]:
            if connection in self._connections:
                connection.receive(*args)
