"""Backend-independent services: layout, cycle state and the multibox controller."""
