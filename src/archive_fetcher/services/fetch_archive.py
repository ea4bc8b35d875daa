"""Fetch-archive use case — the algorithm shared by every forge provider.

It depends only on the ports (:class:`ProviderAdapter`, :class:`Store`,
:class:`Cache`).  Providers decide *how* to ask for a revision or a tarball;
this module decides *when* to ask, and what may be used as a cache key.
"""

from __future__ import annotations

import logging

from archive_fetcher.domain.attrs import Attrs, get_int_attr
from archive_fetcher.domain.entities import Input, Tree
from archive_fetcher.domain.exceptions import IntegrityError
from archive_fetcher.domain.ports.cache import Cache
from archive_fetcher.domain.ports.provider import ProviderAdapter
from archive_fetcher.domain.ports.store import Store

logger = logging.getLogger(__name__)

TREE_KIND = "tree-archive"
DEFAULT_REF = "HEAD"


def immutable_cache_key(input: Input, *, include_host: bool = False) -> Attrs:
    """Cache key for a resolved input.

    Only the commit hash identifies the tree.  ``ref`` moves, and ``owner`` /
    ``repo`` / ``host`` do not change what a commit contains, so none of them
    belong in the key.  *include_host* keeps mirrors of self-hosted instances
    apart at the price of duplicate entries.
    """
    rev = input.rev
    assert rev is not None, "cache keys require a resolved revision"
    key: dict[str, str] = {"type": TREE_KIND, "rev": rev.git_rev}
    if include_host and input.host:
        key["host"] = input.host
    return Attrs(key)


class ArchiveFetcher:
    """Resolves an input to a commit and returns the commit's unpacked tree.

    Parameters
    ----------
    adapter:
        Provider that can resolve refs and build tarball URLs.
    store:
        Content-addressed store that downloads and unpacks tarballs.
    cache:
        Persistent cache mapping immutable keys to stored trees.
    cache_key_includes_host:
        Add ``host`` to cache keys (see :func:`immutable_cache_key`).
    """

    def __init__(
        self,
        adapter: ProviderAdapter,
        store: Store,
        cache: Cache,
        cache_key_includes_host: bool = False,
    ) -> None:
        self._adapter = adapter
        self._store = store
        self._cache = cache
        self._include_host = cache_key_includes_host

    def fetch(self, input: Input) -> tuple[Tree, Input]:
        """Return the tree for *input* and the input pinned to its commit."""
        # 1. Normalize: an unpinned input tracks the default branch
        if input.ref is None and input.rev is None:
            input = input.with_attrs(ref=DEFAULT_REF)

        # 2. Resolve the mutable ref to an immutable revision
        rev = input.rev
        if rev is None:
            rev = self._adapter.get_rev_from_ref(input)
        input = input.with_attrs(ref=None, rev=rev.git_rev)

        # 3. Cache lookup by immutable identity only
        key = immutable_cache_key(input, include_host=self._include_host)
        hit = self._cache.lookup(key)
        if hit is not None:
            logger.debug("Cache hit for %s/%s at %s", input.owner, input.repo, rev)
            tree = Tree(self._store.to_real_path(hit.store_path), hit.store_path)
            self._verify_nar_hash(input, tree)
            input = input.with_attrs(lastModified=get_int_attr(hit.info, "lastModified"))
            return tree, input

        # 4. Download, unpack, and record under the immutable key
        request = self._adapter.get_download_url(input)
        logger.info("Downloading %s/%s at %s", input.owner, input.repo, rev)
        result = self._store.download_tarball(
            request.url, request.headers, name="source", unpack=True
        )
        tree = Tree(self._store.to_real_path(result.store_path), result.store_path)
        self._verify_nar_hash(input, tree)

        input = input.with_attrs(lastModified=result.last_modified)
        self._cache.add(
            key,
            Attrs({"rev": rev.git_rev, "lastModified": result.last_modified}),
            result.store_path,
            allow_overwrite=True,
        )
        return tree, input

    def _verify_nar_hash(self, input: Input, tree: Tree) -> None:
        expected = input.nar_hash
        if expected is None:
            return
        actual = self._store.content_hash(tree.store_path)
        if actual != expected:
            raise IntegrityError(
                f"tree of '{input.owner}/{input.repo}' at {input.rev} has content hash "
                f"'{actual}', but the input expects '{expected}'"
            )
