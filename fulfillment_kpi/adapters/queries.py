# fulfillment_kpi/adapters/queries.py
"""Admin GraphQL documents used by the KPI run."""

SHOP_ID_QUERY = """
query ShopId {
  shop { id }
}
"""

ORDERS_QUERY = """
query OrdersSince($first: Int!, $cursor: String, $query: String!) {
  orders(first: $first, after: $cursor, query: $query, sortKey: CREATED_AT, reverse: true) {
    edges {
      cursor
      node {
        createdAt
        fulfillments { createdAt }
      }
    }
    pageInfo { hasNextPage }
  }
}
"""

METAFIELDS_SET_MUTATION = """
mutation MetafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields { namespace key type value }
    userErrors { field message }
  }
}
"""
