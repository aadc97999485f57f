"""
Internal backends package.

`textdb` holds the pci.ids line classifier and hierarchy builder;
`discovery` locates a database to build the default table from.
Neither is imported here: `discovery` depends on `pciids.table`,
which in turn depends on `textdb`.
"""
