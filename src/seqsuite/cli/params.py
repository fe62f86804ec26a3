"""
Option mapping shared by the command line tools.

Options are ``key=value`` pairs given on the command line or in option
files named by ``param=<file>``. Command line values override file values.
Option files may contain comments (``#``), continued lines (trailing ``\\``),
references to other options (``$(NAME)``) and further ``param=`` entries.
"""

import re
import warnings
from collections.abc import Mapping
from pathlib import Path
from typing import Iterator, Optional, Sequence

from ..io.alphabet import Alphabet, GeneticCode, get_alphabet
from ..io.keyval import parse_boolean, parse_procedure, split_top_level

_REFERENCE = re.compile(r'\$\(([^)]+)\)')


def _parse_option_lines(lines: Sequence[str], source: str) -> list[tuple[str, str]]:
    """Parse option file lines into (key, value) pairs, in order."""
    pairs = []
    pending = ""
    for raw in lines:
        line = raw.split('#', 1)[0].rstrip()
        if line.endswith('\\'):
            pending += line[:-1]
            continue
        line = (pending + line).strip()
        pending = ""
        if not line:
            continue
        if '=' not in line:
            raise ValueError(f"Invalid line in option file {source}: '{line}'")
        key, value = line.split('=', 1)
        pairs.append((key.strip(), value.strip()))
    if pending.strip():
        raise ValueError(f"Option file {source} ends with a continued line")
    return pairs


def read_option_file(path: Path | str, _seen: Optional[set] = None) -> dict[str, str]:
    """
    Read an option file, following nested ``param=`` entries.

    Later values override earlier ones; options read from a nested file
    take effect where the ``param=`` line appears.

    Raises
    ------
    FileNotFoundError
        If the file (or a nested one) does not exist
    ValueError
        On a malformed line or a cycle of nested files
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Option file not found: {path}")
    seen = set() if _seen is None else _seen
    resolved = path.resolve()
    if resolved in seen:
        raise ValueError(f"Option file {path} includes itself")
    seen.add(resolved)

    with open(path, 'r') as f:
        pairs = _parse_option_lines(f.read().splitlines(), str(path))

    options = {}
    for key, value in pairs:
        if key == 'param':
            options.update(read_option_file(value, seen))
        else:
            options[key] = value
    seen.discard(resolved)
    return options


class Parameters(Mapping):
    """
    Read-only mapping of option names to string values, with typed getters.

    Parameters
    ----------
    options : dict
        Option values

    Examples
    --------
    >>> params = Parameters({'number_of_sites': '200', 'seed': '1'})
    >>> params.get_int('number_of_sites', 100)
    200
    """

    def __init__(self, options: Optional[dict[str, str]] = None):
        self._options = dict(options or {})

    @classmethod
    def from_arguments(cls, arguments: Sequence[str]) -> "Parameters":
        """
        Build the option mapping from command line tokens.

        Tokens without '=' are ignored with a warning. Every ``param=``
        file is read first; the other command line options then override
        the file values. ``$(NAME)`` references are resolved last.
        """
        command_line = {}
        files = []
        for token in arguments:
            if '=' not in token:
                warnings.warn(f"Ignoring argument without '=': {token}", UserWarning)
                continue
            key, value = token.split('=', 1)
            key, value = key.strip(), value.strip()
            if key == 'param':
                files.append(value)
            else:
                command_line[key] = value

        options = {}
        for path in files:
            options.update(read_option_file(path))
        options.update(command_line)
        return cls(_resolve_references(options))

    def __getitem__(self, key: str) -> str:
        return self._options[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)

    def __repr__(self) -> str:
        return f"Parameters({self._options!r})"

    def get_string(self, name: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
        """
        String value of an option.

        Raises
        ------
        ValueError
            If the option is required and missing
        """
        if name in self._options:
            return self._options[name]
        if required:
            raise ValueError(f"Parameter '{name}' not specified.")
        return default

    def get_int(self, name: str, default: Optional[int] = None, required: bool = False) -> Optional[int]:
        value = self.get_string(name, None, required)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"Parameter '{name}' must be an integer, got '{value}'")

    def get_float(self, name: str, default: Optional[float] = None, required: bool = False) -> Optional[float]:
        value = self.get_string(name, None, required)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"Parameter '{name}' must be a number, got '{value}'")

    def get_bool(self, name: str, default: bool = False) -> bool:
        value = self.get_string(name)
        if value is None:
            return default
        try:
            return parse_boolean(value)
        except ValueError:
            raise ValueError(f"Parameter '{name}' must be a boolean, got '{value}'")

    def get_fraction(self, name: str, default: float = 1.0) -> float:
        """
        A proportion, written either as a fraction or as a percentage.

        Examples
        --------
        >>> Parameters({'gaps': '50%'}).get_fraction('gaps')
        0.5
        """
        value = self.get_string(name)
        if value is None:
            return default
        try:
            if value.endswith('%'):
                return float(value[:-1]) / 100.0
            return float(value)
        except ValueError:
            raise ValueError(f"Parameter '{name}' must be a fraction or a percentage, got '{value}'")

    def get_vector(self, name: str, default: Sequence[str] = ()) -> list[str]:
        """Comma separated list; commas inside parentheses do not split."""
        value = self.get_string(name)
        if value is None:
            return list(default)
        return split_top_level(value)

    def get_file_path(self, name: str, required: bool = True, must_exist: bool = True) -> str:
        """
        File path option.

        Returns
        -------
        str
            The path, or 'none' when the option is absent (or 'none') and
            not required

        Raises
        ------
        ValueError
            If the option is required and missing
        FileNotFoundError
            If the file must exist and does not
        """
        value = self.get_string(name, 'none')
        if value == 'none':
            if required:
                raise ValueError(f"Parameter '{name}' not specified.")
            return 'none'
        if must_exist and not Path(value).exists():
            raise FileNotFoundError(f"File not found: {value} (parameter '{name}')")
        return value


def read_alphabet(params: Parameters) -> tuple[Alphabet, Optional[GeneticCode]]:
    """
    Alphabet from the 'alphabet' option, and the genetic code for codons.

    The alphabet is 'DNA', 'RNA', 'Protein' or 'Codon(letter=DNA)'; the
    genetic code ('genetic_code', default 'Standard') is only read for
    codon alphabets.
    """
    name, args = parse_procedure(params.get_string('alphabet', required=True))
    unknown = set(args) - {'letter'}
    if unknown or (args and name != 'Codon'):
        raise ValueError(f"Invalid alphabet description: {params['alphabet']}")
    alphabet = get_alphabet(name, args.get('letter'))
    code = None
    if alphabet.is_codon:
        code = GeneticCode(params.get_string('genetic_code', 'Standard'))
    return alphabet, code


def _resolve_references(options: dict[str, str]) -> dict[str, str]:
    """Replace ``$(NAME)`` by the value of option NAME, recursively."""

    def resolve(key: str, stack: tuple) -> str:
        if key in stack:
            raise ValueError(f"Circular reference involving option '{key}'")

        def substitute(match: re.Match) -> str:
            name = match.group(1)
            if name not in options:
                raise ValueError(f"Option '{key}' refers to unknown option '{name}'")
            return resolve(name, stack + (key,))

        return _REFERENCE.sub(substitute, options[key])

    return {key: resolve(key, ()) for key in options}
