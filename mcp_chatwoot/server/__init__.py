"""Transport fronts: streamable HTTP app and stdio."""
