"""AI gossip world - simulated persona group chats mined for tabloid stories."""
