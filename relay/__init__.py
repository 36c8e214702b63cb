"""topic-relay: in-memory keyed event broker with consumer groups and long-poll delivery."""
