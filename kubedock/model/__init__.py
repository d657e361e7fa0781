"""Records for containers, execs, images and networks, resource quantities, and their in-memory store."""