"""
Key/value text syntax shared by options, action lists and model descriptions.

Descriptions use the procedure syntax ``Name(key1=value1, key2=value2)``,
where values may themselves be procedures, e.g.
``Invariant(dist=Gamma(n=4, alpha=0.5), p=0.1)``.
"""


def split_top_level(text: str, separator: str = ',') -> list[str]:
    """
    Split text on separators that are not nested inside parentheses.

    Parameters
    ----------
    text : str
        Text to split
    separator : str
        Single-character separator

    Returns
    -------
    list[str]
        Stripped, non-empty tokens

    Examples
    --------
    >>> split_top_level("SiteFrequencies,TajimaD(positions=all),FuAndLiDStar")
    ['SiteFrequencies', 'TajimaD(positions=all)', 'FuAndLiDStar']
    """
    tokens = []
    depth = 0
    current = []
    for char in text:
        if char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth < 0:
                raise ValueError(f"Unbalanced parentheses in '{text}'")
        if char == separator and depth == 0:
            tokens.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
    if depth != 0:
        raise ValueError(f"Unbalanced parentheses in '{text}'")
    tokens.append(''.join(current).strip())
    return [token for token in tokens if token]


def parse_procedure(description: str) -> tuple[str, dict[str, str]]:
    """
    Parse ``Name(key=value, ...)`` into a name and a keyword mapping.

    A description without parentheses is a bare name with no arguments.

    Raises
    ------
    ValueError
        On unbalanced parentheses, arguments without '=', or a key given
        twice.

    Examples
    --------
    >>> parse_procedure("TajimaD(positions=synonymous)")
    ('TajimaD', {'positions': 'synonymous'})
    >>> parse_procedure("Watterson75")
    ('Watterson75', {})
    """
    description = description.strip()
    if '(' not in description:
        if ')' in description:
            raise ValueError(f"Unbalanced parentheses in '{description}'")
        return description, {}

    start = description.index('(')
    if not description.endswith(')'):
        raise ValueError(f"Invalid procedure syntax: '{description}'")
    name = description[:start].strip()
    if not name:
        raise ValueError(f"Missing procedure name in '{description}'")

    args = {}
    for token in split_top_level(description[start + 1:-1]):
        if '=' not in token:
            raise ValueError(f"Argument '{token}' in '{description}' is not of the form key=value")
        key, value = token.split('=', 1)
        key = key.strip()
        if key in args:
            raise ValueError(f"Argument '{key}' given twice in '{description}'")
        args[key] = value.strip()
    return name, args


def parse_boolean(value: str) -> bool:
    """Interpret 'true/yes/on/1' and 'false/no/off/0' (case-insensitive)."""
    lowered = value.strip().lower()
    if lowered in ('true', 'yes', 'on', '1'):
        return True
    if lowered in ('false', 'no', 'off', '0'):
        return False
    raise ValueError(f"Invalid boolean value: '{value}'")
