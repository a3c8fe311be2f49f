"""Issue link parsing from PR and issue bodies.

Patterns that indicate issue relationships:
- Fixes #X, Closes #X, Resolves #X (closing keywords)
- Depends on #X, Blocked by #X, Requires #X, After #X (dependencies)
- Part of #X, Sub-issue of #X, Parent #X, Child of #X (hierarchy)
- Related to #X, See #X, Ref #X, Links to #X (references)
- Plain #X mentions
"""

import re
from typing import Optional, Set

# ASCII matching only; non-ASCII digits never form an issue number.
ISSUE_PATTERNS = [
    # Closing keywords (GitHub auto-close)
    re.compile(
        r"(?:fix(?:es|ed)?|close[sd]?|resolve[sd]?)\s+#(\d+)",
        re.IGNORECASE | re.ASCII,
    ),
    # Dependency keywords
    re.compile(
        r"(?:depends?\s+on|blocked?\s+by|requires?|after)\s+#(\d+)",
        re.IGNORECASE | re.ASCII,
    ),
    # Hierarchical relationships
    re.compile(
        r"(?:part\s+of|sub-?issue\s+of|parent|child\s+of)\s+#(\d+)",
        re.IGNORECASE | re.ASCII,
    ),
    # Reference keywords
    re.compile(
        r"(?:related?\s+to|see|ref(?:erence)?s?|links?\s+to)\s+#(\d+)",
        re.IGNORECASE | re.ASCII,
    ),
    # Plain mentions not glued to a preceding word character
    re.compile(r"(?:^|[^\w])#(\d+)(?=\D|$)", re.MULTILINE | re.ASCII),
]


def parse_issue_links(body: Optional[str]) -> Set[int]:
    """Extract every referenced issue number from a text body.

    Args:
        body: PR or issue body. None is treated as empty.

    Returns:
        Unique positive issue numbers mentioned in the body.
    """
    issues: Set[int] = set()
    if not body:
        return issues

    for pattern in ISSUE_PATTERNS:
        for match in pattern.finditer(body):
            issue_number = int(match.group(1))
            if issue_number > 0:
                issues.add(issue_number)

    return issues
