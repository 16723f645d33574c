"""KMB stop tracker: browse stops, live arrivals and favorite stops."""
