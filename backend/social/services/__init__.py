"""
Service layer: one module per component.

    users     - User Directory (accounts + followers/following/posts counters)
    follows   - Follow Graph
    posts     - Post Store (posts + likes/comments counters)
    likes     - Like Registry
    comments  - Comment Tree

Views call these functions; they never write counters themselves.
"""
