from poi_radio.graphql.client import GraphQueryClient, QueryError

__all__ = ["GraphQueryClient", "QueryError"]
