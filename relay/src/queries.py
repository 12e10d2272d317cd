"""Fixed GraphQL documents sent to the GitHub API.

Both queries take a single ``$username`` variable.
"""

PINNED_REPOS_QUERY = """
query PinnedRepos($username: String!) {
  user(login: $username) {
    pinnedItems(first: 6, types: [REPOSITORY]) {
      totalCount
      edges {
        node {
          ... on Repository {
            name
            id
            url
            description
            stargazers {
              totalCount
            }
            forkCount
            primaryLanguage {
              name
              color
            }
          }
        }
      }
    }
  }
}
"""

USER_STATS_QUERY = """
query UserStats($username: String!) {
  user(login: $username) {
    name
    login
    bio
    avatarUrl
    company
    location
    email
    websiteUrl
    twitterUsername
    createdAt
    pronouns
    followers {
      totalCount
    }
    following {
      totalCount
    }
    repositories(first: 100, ownerAffiliations: OWNER, privacy: null) {
      totalCount
      nodes {
        name
        stargazers {
          totalCount
        }
        forkCount
        isPrivate
        isFork
        languages(first: 10, orderBy: {field: SIZE, direction: DESC}) {
          edges {
            size
            node {
              name
              color
            }
          }
          totalSize
        }
      }
    }
    repositoriesContributedTo(first: 100, contributionTypes: [COMMIT, ISSUE, PULL_REQUEST, REPOSITORY]) {
      totalCount
      nodes {
        name
        owner {
          login
        }
        isPrivate
      }
    }
    starredRepositories {
      totalCount
    }
    contributionsCollection {
      totalCommitContributions
      totalPullRequestContributions
      totalIssueContributions
      totalRepositoryContributions
      totalPullRequestReviewContributions
      restrictedContributionsCount
      contributionYears
    }
    pullRequests {
      totalCount
    }
    issues {
      totalCount
    }
  }
}
"""
