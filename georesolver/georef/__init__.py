"""
Geographic entity resolution.

Responsibilities:
- Fetch and cache the reference province/municipality lists (GeoRef).
- Normalize administrative names so the two upstream sources can be compared.
- Resolve geocoder results (Nominatim) to canonical province/municipality ids.
- Build the normalized address record returned to the rest of the application.
"""
