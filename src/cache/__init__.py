"""Read cache kept coherent by write-path signals."""
