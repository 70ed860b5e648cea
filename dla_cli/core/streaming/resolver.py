"""
Source resolution.

Turns the service names given on the command line into the list of
containers to follow. Each name is looked up on its own worker thread and
the results are merged with duplicates removed.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Hashable, List, Sequence

from dla_cli.core.errors import ResolutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceDescriptor:
    """One followable log source."""
    id: Hashable
    display_name: str


LookupAll = Callable[[], List[SourceDescriptor]]
LookupByName = Callable[[str], List[SourceDescriptor]]


def dedupe_sources(sources: Sequence[SourceDescriptor]) -> List[SourceDescriptor]:
    """Drop repeated identities, keeping the first occurrence of each."""
    seen = set()
    unique = []
    for source in sources:
        if source.id in seen:
            continue
        seen.add(source.id)
        unique.append(source)
    return unique


def resolve_sources(
    filters: Sequence[str],
    lookup_all: LookupAll,
    lookup_by_name: LookupByName
) -> List[SourceDescriptor]:
    """
    Resolve name filters to a deduplicated list of sources.

    Args:
        filters: Names to look up; empty means every known source
        lookup_all: Lists every source
        lookup_by_name: Lists the sources matching one name

    Returns:
        Sources in first-seen order (possibly empty)

    Raises:
        ResolutionError: If any lookup fails; no partial result is returned
    """
    if not filters:
        try:
            return list(lookup_all())
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(str(e)) from e

    logger.debug(f"Resolving {len(filters)} filters: {', '.join(filters)}")

    results = {}
    with ThreadPoolExecutor(max_workers=len(filters), thread_name_prefix="resolve") as executor:
        futures = {
            executor.submit(lookup_by_name, name): index
            for index, name in enumerate(filters)
        }
        for future in as_completed(futures):
            error = future.exception()
            if error is not None:
                for pending in futures:
                    pending.cancel()
                if isinstance(error, ResolutionError):
                    raise error
                raise ResolutionError(str(error)) from error
            results[futures[future]] = future.result()

    merged = []
    for index in range(len(filters)):
        merged.extend(results[index])

    sources = dedupe_sources(merged)
    logger.debug(f"Resolved {len(sources)} unique sources from {len(merged)} matches")
    return sources
