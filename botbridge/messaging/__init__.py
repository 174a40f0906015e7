"""Activity pipeline -- dispatch, authorization, mentions, cards, transport."""
