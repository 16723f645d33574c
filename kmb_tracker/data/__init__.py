"""Data access: KMB API client, local storage and favorites."""
