"""Real-time GitHub pull request monitoring via webhooks.

monitor-pr watches a single pull request and streams its activity as
newline-delimited JSON:
- Linked issue discovery from the PR body (breadth-first, depth-limited)
- Webhook signature verification and payload normalization
- Local webhook server fed by ``gh webhook forward``
"""
