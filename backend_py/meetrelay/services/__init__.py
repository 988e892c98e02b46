"""Room coordination and negotiation relay, independent of the transport."""
