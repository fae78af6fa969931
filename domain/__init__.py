"""Describes the BrewMate domain. Centres around the recipe store.

What is in here?

- Recipes and their ingredients, validated with pydantic.
- A store that keeps everything in memory and writes a JSON snapshot on
  every change. One process, one writer.
- A recipe generator sitting behind a language model api. The model is held
  to a fixed output schema, anything else is a failure.
- The glue turning generated drafts into recipes the store accepts.

The generator is the only external service. Fake it in tests.
"""
