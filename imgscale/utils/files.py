"""
File helpers used by the command line interface.
"""

from pathlib import Path


def verify_file_exists(path: str | Path, verbose: bool = False) -> bool:
    """
    Check that ``path`` is an existing file.

    Args:
        path: File to check
        verbose: Print an error line when the file is missing

    Returns:
        True if the file exists
    """
    path = Path(path)
    if not path.is_file():
        if verbose:
            print(f'Error: "{path}" does not exist.')
        return False
    return True


def get_unique_filename(path: str | Path, verbose: bool = False) -> Path:
    """
    Return ``path`` or, if it is taken, the first free ``<stem>_N<ext>``.

    Example:
        out.jpg exists, out_1.jpg exists -> out_2.jpg
    """
    path = Path(path)
    if not path.exists():
        return path
    if verbose:
        print(f'"{path}" already exists.')

    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem}_{counter}{path.suffix}")
        if not candidate.exists():
            break
        counter += 1

    if verbose:
        print(f'Using alternative filename: "{candidate}"')
    return candidate
