from roomwatch.models import Listing


def unique_by_detail_url(listings: list[Listing]) -> list[Listing]:
    seen = set()
    unique = []
    for listing in listings:
        if listing.unique_key in seen:
            continue
        seen.add(listing.unique_key)
        unique.append(listing)
    return unique


def filter_new(candidates: list[Listing], known_detail_urls: set[str]) -> list[Listing]:
    """Keep candidates whose detail URL has not been reported for this search.

    Only the detail URL is compared: a known listing whose rent changed is
    still treated as already seen.
    """
    return [c for c in candidates if c.unique_key not in known_detail_urls]
