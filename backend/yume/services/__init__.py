"""Services: document synchronization, domain mutators and outbound integrations."""
