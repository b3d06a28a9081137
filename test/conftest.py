"""Shared fixtures: example behaviours used across the test suite."""

import pytest

from metaobjects import encapsulate


def songwriter_behaviour():
    def initialize(self):
        self._songs = []
        return self

    def add_song(self, name):
        self._songs.append(name)
        return self.self

    def songs(self):
        return self._songs

    return {"initialize": initialize, "add_song": add_song, "songs": songs}


def subscribable_behaviour():
    def initialize(self):
        self._subscribers = []
        return self

    def subscribe(self, callback):
        self._subscribers.append(callback)
        return self

    def notify(self):
        receiver = self.self
        for callback in self._subscribers:
            callback(receiver)

    return {"initialize": initialize, "subscribe": subscribe, "notify": notify}


def notifying_behaviour():
    def add_song(self, name):
        self.notify()

    return {"notify": None, "add_song": add_song}


@pytest.fixture
def songwriter():
    return encapsulate(songwriter_behaviour(), name="Songwriter")


@pytest.fixture
def subscribable():
    return encapsulate(subscribable_behaviour(), name="Subscribable")


@pytest.fixture
def notifying():
    return encapsulate(notifying_behaviour(), name="Notifying")


@pytest.fixture
def songwriter_definition():
    return songwriter_behaviour()
