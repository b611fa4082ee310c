"""
GraphQL documents sent to the GitHub API.
"""

PULL_REQUEST_SEARCH_QUERY = """
query($searchQuery: String!, $first: Int!, $labelsFirst: Int!, $after: String) {
  search(type: ISSUE, first: $first, query: $searchQuery, after: $after) {
    nodes {
      ... on PullRequest {
        id
        title
        author {
          __typename
          login
        }
        url
        number
        repository {
          nameWithOwner
        }
        createdAt
        mergedAt
        additions
        deletions
        # for lead time
        commits(first: 1) {
          nodes {
            commit {
              authoredDate
            }
          }
        }
        baseRefName
        headRefName
        reviews {
          totalCount
        }
        labels(first: $labelsFirst) {
          totalCount
          nodes {
            name
          }
        }
      }
    }
    pageInfo {
      endCursor
      hasNextPage
    }
  }
}
"""

TEAMS_QUERY = """
query($org: String!, $first: Int!, $repositoriesFirst: Int!, $after: String) {
  organization(login: $org) {
    teams(first: $first, after: $after) {
      nodes {
        name
        repositories(first: $repositoriesFirst) {
          totalCount
          nodes {
            nameWithOwner
          }
        }
      }
      pageInfo {
        endCursor
        hasNextPage
      }
    }
  }
}
"""

RATE_LIMIT_QUERY = """
query {
  viewer {
    login
  }
  rateLimit {
    limit
    cost
    remaining
    resetAt
  }
}
"""
