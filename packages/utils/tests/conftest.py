"""Pytest configuration and fixtures for utils package tests."""

from dataclasses import dataclass

import pytest


class Person:
    """Model with getters and setters over protected and private storage."""

    species = "human"

    def __init__(self, forename, surname, age, height):
        self._forename = forename
        self._surname = surname
        self.__age = age
        self._height = height

    def get_forename(self):
        return self._forename

    def set_forename(self, forename):
        self._forename = forename

    def get_surname(self):
        return self._surname

    def set_surname(self, surname):
        self._surname = surname

    def get_height(self):
        return self._height

    def is_adult(self):
        return self.__age >= 18


class Worker(Person):
    """Subclass adding a private salary and a public attribute."""

    def __init__(self, forename, surname, age, height, salary):
        super().__init__(forename, surname, age, height)
        self.__salary = salary
        self.department = None


class Account:
    """Model using camelCase accessors and a read-only property."""

    def __init__(self, owner, balance):
        self._owner = owner
        self._balance = balance

    def getOwner(self):
        return self._owner

    def setOwner(self, owner):
        self._owner = owner

    @property
    def balance(self):
        return self._balance


@dataclass
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class FrozenPoint:
    x: int
    y: int


@pytest.fixture
def person():
    return Person("John", "Doe", 30, 180)


@pytest.fixture
def worker():
    return Worker("Jane", "Roe", 45, 170, 5000)


@pytest.fixture
def account():
    return Account("John", 100)


@pytest.fixture
def people():
    return [
        {"name": "Carol", "age": 35, "team": "red"},
        {"name": "Alice", "age": 30, "team": "blue"},
        {"name": "Bob", "age": 30, "team": "red"},
        {"name": "Dave", "age": None, "team": "blue"},
    ]


@pytest.fixture
def person_class():
    return Person


@pytest.fixture
def worker_class():
    return Worker


@pytest.fixture
def point_classes():
    return Point, FrozenPoint
