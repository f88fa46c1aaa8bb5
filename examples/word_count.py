"""
Word-count components for a multilang topology.

Declare them in a topology with a ShellSpout/ShellBolt running, e.g.:
    storm-adapter word_count:SentenceSpout
    storm-adapter word_count:SplitSentence
    storm-adapter word_count:WordCount
"""
import itertools
import random
from collections import Counter

from storm_adapter import Bolt, Spout

SENTENCES = [
    "the cow jumped over the moon",
    "an apple a day keeps the doctor away",
    "four score and seven years ago",
    "snow white and the seven dwarfs",
]


class SentenceSpout(Spout):
    """Emits random sentences, replaying any that fail."""

    def initialize(self, conf, context):
        self._ids = itertools.count()
        self._in_flight = {}

    def next_tuple(self):
        tup_id = next(self._ids)
        sentence = random.choice(SENTENCES)
        self._in_flight[tup_id] = sentence
        self.emit([sentence], tup_id=tup_id)

    def ack(self, tup_id):
        self._in_flight.pop(tup_id, None)

    def fail(self, tup_id):
        sentence = self._in_flight.get(tup_id)
        if sentence is not None:
            self.emit([sentence], tup_id=tup_id)


class SplitSentence(Bolt):
    def process(self, tup):
        for word in tup.values[0].split():
            self.emit([word])


class WordCount(Bolt):
    def initialize(self, conf, context):
        self._counts = Counter()

    def process(self, tup):
        word = tup.values[0]
        self._counts[word] += 1
        self.emit([word, self._counts[word]])
