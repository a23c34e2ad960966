"""Maven coordinates, version ranges, POM parsing and dependency resolution."""