"""
Reading the listing-source document.

This package is responsible for:
* Parsing JSON or YAML listing sources into a ListingSource.
* Rejecting sources that are missing, empty, or have no listing id.
"""
