"""Pure domain services: budget calculator, business rules, debt simulation."""
