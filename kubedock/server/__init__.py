"""Request bodies, filters and the container and network operations of the API."""