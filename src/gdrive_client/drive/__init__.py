"""Drive v3 REST client, enumeration, transfers and mutations."""
