"""
Response Field Types

The loader stores CSV text as-is and relies on SQLite column affinity, so a
numeric column can still hold a value that did not convert (e.g. "n/a" in
`age`). Response models declare those columns with these types so a stored
row is always returned as found.
"""

from typing import Optional, Union

StoredInt = Optional[Union[int, float, str]]
StoredFloat = Optional[Union[float, str]]
