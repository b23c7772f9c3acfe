"""
List the open issues of a GitHub repository with page-number pagination.

    python examples/github_issues.py python/cpython --limit 30

Set GITHUB_TOKEN to raise the API rate limit.
"""

import argparse
import asyncio
import os

import aiohttp

from lazy_paginate import paginate, setup_logging

API_URL = "https://api.github.com/repos/{repo}/issues"


def issue_fetcher(session: aiohttp.ClientSession, repo: str):
    async def fetch(request):
        params = {"state": "open", "per_page": request.limit, "page": request.page}
        async with session.get(API_URL.format(repo=repo), params=params) as response:
            response.raise_for_status()
            issues = await response.json()
            return {
                "items": issues,
                # GitHub advertises further pages through the Link header
                "pageInfo": {"hasNextPage": 'rel="next"' in response.headers.get("Link", "")},
            }
    return fetch


async def main(repo: str, limit: int, page_size: int):
    headers = {"Accept": "application/vnd.github+json"}
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        headers["Authorization"] = f"Bearer {token}"

    timeout = aiohttp.ClientTimeout(total=30)
    async with aiohttp.ClientSession(headers=headers, timeout=timeout) as session:
        issues = paginate(
            issue_fetcher(session, repo),
            strategy="page",
            limit=page_size,
            error_policy={"type": "continue", "max_error_count": 3},
            hooks={"on_page": lambda request: print(f"-> page {request.page}")},
        )
        await (
            issues
            .filter(lambda issue: "pull_request" not in issue)
            .take(limit)
            .for_each(lambda issue, index: print(f"{index + 1:>4}. #{issue['number']} {issue['title']}"))
        )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("repo", help="owner/name")
    parser.add_argument("--limit", type=int, default=20)
    parser.add_argument("--page-size", type=int, default=50)
    args = parser.parse_args()

    setup_logging()
    asyncio.run(main(args.repo, args.limit, args.page_size))
