"""
Presentation-side plumbing for awareness moments.

The dispatcher is called by the engine; the bridge and launcher connect
it to an external overlay program.
"""
