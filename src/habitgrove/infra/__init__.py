"""Infrastructure: database engine wiring and SQLModel repositories."""
