"""Tiny helpers shared across test modules."""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit


def bearer(token: str) -> dict[str, str]:
    """Build the ``Authorization`` header for ``token``."""
    return {"Authorization": f"Bearer {token}"}


def split_link(link: str) -> tuple[str, dict[str, str]]:
    """Split a verification link into its path and flat query parameters.

    Parameters
    ----------
    link: str
        Absolute URL as produced by the link signer.

    Returns
    -------
    tuple[str, dict[str, str]]
        The URL path and a ``{name: first_value}`` query mapping.
    """
    parts = urlsplit(link)
    query = {key: values[0] for key, values in parse_qs(parts.query).items()}
    return parts.path, query
