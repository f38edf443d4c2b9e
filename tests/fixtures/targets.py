"""Target classes bound by shadow interfaces during tests."""

import abc
import ctypes
from dataclasses import dataclass
from typing import ClassVar
from typing import overload


class Greeter:
    """Plain target with instance, static and private members."""

    name: str
    greeting: str
    count: int
    __secret: str

    def __init__(self, name: str, greeting: str = "Hello") -> None:
        """Initialize the greeter.

        :param name: Greeter name.
        :param greeting: Greeting prefix.
        """
        self.name = name
        self.greeting = greeting
        self.count = 0
        self.__secret = f"{name}-secret"
        self._friends: list[Greeter] = []

    def greet(self, other: str, punctuation: str = "!") -> str:
        """Greet someone.

        :param other: Name to greet.
        :param punctuation: Trailing punctuation.
        :returns: Greeting text.
        """
        self.count += 1
        return f"{self.greeting}, {other}{punctuation}"

    def __whisper(self, text: str) -> str:
        return text.lower()

    @staticmethod
    def shout(text: str) -> str:
        """Return ``text`` in upper case.

        :param text: Input text.
        :returns: Upper-cased text.
        """
        return text.upper()

    @classmethod
    def describe(cls) -> str:
        """Return the class name.

        :returns: Class name.
        """
        return cls.__name__

    def befriend(self, other: "Greeter") -> str:
        """Record ``other`` as a friend.

        :param other: Friend to add.
        :returns: Pair description.
        """
        self._friends.append(other)
        return f"{self.name} & {other.name}"

    def friends(self) -> list["Greeter"]:
        """Return recorded friends.

        :returns: Friends in insertion order.
        """
        return list(self._friends)

    def count_named(self, others: list["Greeter"]) -> int:
        """Count greeters in ``others`` sharing this greeter's name.

        :param others: Greeters to inspect.
        :returns: Matching count.
        """
        return sum(1 for other in others if other.name == self.name)

    def clone(self) -> "Greeter":
        """Return a copy with the same name and greeting.

        :returns: New greeter.
        """
        return Greeter(self.name, self.greeting)

    def fail(self, message: str) -> None:
        """Raise ``ValueError``.

        :param message: Error message.
        :raises ValueError: Always.
        """
        raise ValueError(message)


class LoudGreeter(Greeter):
    """Subclass used for target assignability checks."""

    def greet(self, other: str, punctuation: str = "!") -> str:
        return super().greet(other, punctuation).upper()


class Registry:
    """Target with only class-level state."""

    total: ClassVar[int] = 0
    entries: ClassVar[list[str]] = []

    @staticmethod
    def register(entry: str) -> int:
        """Append ``entry`` and return the new total.

        :param entry: Entry to record.
        :returns: Updated total.
        """
        Registry.entries.append(entry)
        Registry.total += 1
        return Registry.total

    @staticmethod
    def reset() -> None:
        """Clear all recorded entries."""
        Registry.entries = []
        Registry.total = 0


@dataclass(frozen=True)
class Point:
    """Frozen target whose fields are still rebound through shadows."""

    ORIGIN_LABEL: ClassVar[str] = "origin"

    x: int
    y: int


class Vector:
    """Slotted target without annotations."""

    __slots__ = ("dx", "dy")

    def __init__(self, dx: float, dy: float) -> None:
        self.dx = dx
        self.dy = dy


class Label:
    """Target with overloaded constructors."""

    text: str
    size: int

    @overload
    def __init__(self, text: str) -> None: ...

    @overload
    def __init__(self, text: str, size: ctypes.c_int) -> None: ...

    def __init__(self, text, size=12):
        if len(text) == 0:
            raise ValueError("text must not be empty")
        self.text = text
        self.size = size


class Formatter:
    """Target with overloaded methods."""

    @overload
    def render(self, value: int) -> str: ...

    @overload
    def render(self, value: str) -> str: ...

    @overload
    def render(self, value: object) -> str: ...

    def render(self, value):
        return f"{type(value).__name__}:{value}"

    def join(self, *parts: str) -> str:
        """Join ``parts`` with dashes.

        :param parts: Parts to join.
        :returns: Joined text.
        """
        return "-".join(parts)


class Feeder:
    """Base declaring a permissive method."""

    def feed(self, food: object) -> str:
        return f"object:{food}"


class StrictFeeder(Feeder):
    """Subclass declaring a narrower overload of ``feed``."""

    def feed(self, food: int) -> str:
        return f"int:{food}"


class Animal:
    """Root of a small hierarchy used for cost checks."""


class Dog(Animal):
    """Middle of the hierarchy."""


class Puppy(Dog):
    """Leaf of the hierarchy."""


class Walker(abc.ABC):
    """Interface implemented by :class:`Robot`."""

    @abc.abstractmethod
    def walk(self) -> str:
        """Walk somewhere."""


class Robot(Walker):
    """Concrete walker."""

    def walk(self) -> str:
        return "beep"


class Kennel:
    """Target with methods overloaded on a class hierarchy."""

    @overload
    def admit(self, animal: Animal) -> str: ...

    @overload
    def admit(self, animal: Dog) -> str: ...

    def admit(self, animal):
        return type(animal).__name__


class Base(abc.ABC):
    """Abstract root of a nominal hierarchy."""


class Mid(Base):
    """Concrete subclass of an ABC."""


class Leaf(Mid):
    """Two steps below :class:`Base`."""


class Stepper:
    """Target overloaded on an ABC-rooted hierarchy, farthest overload first."""

    @overload
    def take(self, value: Base) -> str: ...

    @overload
    def take(self, value: Mid) -> str: ...

    def take(self, value):
        return type(value).__name__


class _QuacksMeta(type):
    def __subclasscheck__(cls, subclass: type) -> bool:
        return hasattr(subclass, "quack")


class Duck(metaclass=_QuacksMeta):
    """Structural type: anything with ``quack`` is a subclass."""

    def quack(self) -> str:
        return "quack"


class Mallard:
    """Quacks without inheriting from :class:`Duck`."""

    def quack(self) -> str:
        return "mallard"


class RoboDuck(Robot):
    """Walker that also quacks."""

    def quack(self) -> str:
        return "beep quack"


class Pond:
    """Target overloaded on a structural and a nominal parameter."""

    @overload
    def visit(self, visitor: Duck) -> str: ...

    @overload
    def visit(self, visitor: Walker) -> str: ...

    def visit(self, visitor):
        return type(visitor).__name__


class Locker:
    """Slotted target with a private slot."""

    __slots__ = ("__code", "owner")

    def __init__(self, code: str, owner: str) -> None:
        self.__code = code
        self.owner = owner

    def reveal(self) -> str:
        return self.__code


class Team:
    """Target constructed from a list of greeters."""

    members: list[Greeter]

    def __init__(self, members: list[Greeter]) -> None:
        """Initialize the team.

        :param members: Team members.
        """
        self.members = list(members)

    def size(self) -> int:
        return len(self.members)

    def names(self) -> str:
        return ",".join(member.name for member in self.members)
