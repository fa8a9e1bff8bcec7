"""GraphQL documents sent to GitHub."""

# Commits are capped at 50; longer pull requests are silently truncated.
PULL_REQUEST_QUERY = """
query($owner: String!, $repo: String!, $pr: Int!) {
  repository(owner: $owner, name: $repo) {
    name
    pullRequest(number: $pr) {
      title baseRefName author { login } baseRefOid headRefOid createdAt
      commits(first: 50) {
        nodes {
          commit {
            messageHeadline
            abbreviatedOid
            author { user { login } }
            associatedPullRequests(first: 1) {
              nodes {
                number
              }
            }
          }
        }
      }
    }
  }
}
"""

PACKAGE_JSON_QUERY = """
query($owner: String!, $repo: String!, $expression: String!) {
  repository(owner: $owner, name: $repo) {
    object(expression: $expression) {
      ... on Blob {
        text
      }
    }
  }
}
"""
