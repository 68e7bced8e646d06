"""W-TinyLFU cache: window LRU, segmented LRU, bloom-filter doorkeeper and count-min sketch."""