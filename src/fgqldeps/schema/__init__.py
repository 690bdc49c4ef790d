"""Reading federated SDL and its directives."""
