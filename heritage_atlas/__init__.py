"""Heritage Atlas - Crowdsourced map of cultural properties with 3D captures.

Modules:
    core: Foundation classes (HTTP client, geocoding, liveness tokens, geo math)
    model: Data structures (GeoEntity, MediaCapture, drafts, messages)
    repositories: REST endpoints as typed finders and commands
    ui: Streamlit interface (map engine adapter, popup and wizard state machines)

Example:
    from heritage_atlas.core import HttpClient
    from heritage_atlas.repositories import GeoEntityRepository
    from heritage_atlas.ui import MapRenderer, FeatureSynchronizer, ViewMode
"""
