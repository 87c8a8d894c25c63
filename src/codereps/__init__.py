"""codereps: spaced-repetition review scheduling for coding-interview practice."""

from codereps.consts import VERSION

__version__ = VERSION
