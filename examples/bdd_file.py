"""How to load diagrams from `.bdd` files, write them, and plot them."""
import lindd.bdd as _bdd
import lindd.bddfile as _bddfile


TEXT = '''\
3 1
0 4
1+2:(1;2,3)|
-1+3:(2;4,0)(3;5,4)|
2:(4;6,6)(5;0,6)|
:(6;0,0)|
---
'''


def bdd_file_example():
    """Entry point."""
    filename = 'system.bdd'
    with open(filename, 'w') as f:
        f.write(TEXT)
    system = _bddfile.load(filename)
    print(system)
    _bddfile.dump(system, 'system_out.bdd')
    with system.get(0).read() as bdd:
        print(bdd)
        _bdd.dump_dot(bdd, 'system.dot')
        # requires GraphViz
        proc = _bdd.draw_pdf(bdd, 'system.pdf')
    proc.wait()


if __name__ == '__main__':
    bdd_file_example()
