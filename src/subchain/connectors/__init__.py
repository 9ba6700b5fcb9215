"""Interactive front ends over AppState."""
