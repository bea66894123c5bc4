"""p4wrap: a thin Python wrapper around the Perforce command-line client.

What p4wrap provides
- `P4` (`p4wrap.client`): one object per session, holding a working directory and execution
  options, with one method per verb (`edit`, `add`, `sync`, `submit`, `revert`, `stat`, ...).
  Methods run `p4` through the system shell and return stdout, or parsed records for
  `fstat`-based methods.
- `parse_fstat` (`p4wrap.fstat`): converts `p4 fstat` report text into dicts, including the
  nested `other` list describing other clients with the file open.
- Transparent re-login: when `p4` reports that the password ticket is invalid or unset,
  the command is retried once after logging in again with the cached credentials
  (`p4wrap.runner`).

What p4wrap intentionally does not do
- Quote or escape arguments. Command lines are joined with spaces and handed to the shell.
- Store credentials securely. The last username/password passed to `login()` live in memory
  on the `P4` object.
- Talk to the Perforce server itself; everything goes through the `p4` binary.

Errors
All failures are raised as `P4Error` with an `ErrorKind` (`p4wrap.errors`).
"""

from __future__ import annotations

from .client import P4
from .errors import ErrorKind, P4Error
from .fstat import parse_fstat

__all__ = ["P4", "ErrorKind", "P4Error", "parse_fstat", "__version__"]

__version__ = "0.1.0"
