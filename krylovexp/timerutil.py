'''
Performance timers for the krylov code, used statically with Timers.tic(name) and Timers.toc(name)

Timers started while another one is running become its children, so the time spent applying
the operator is reported as a fraction of the lanczos expansion, which is itself a fraction of
exponentiate.
'''

import time

from termcolor import cprint

class TimerData():
    'accumulated time and call count for one node of the timer tree'

    def __init__(self, name, parent=None):
        self.name = name
        self.parent = parent
        self.children = {} # name -> TimerData, in creation order

        self.num_calls = 0
        self.total_secs = 0.0
        self.start_time = None

    def child(self, name):
        'get the child timer with the given name, creating it if needed'

        td = self.children.get(name)

        if td is None:
            td = self.children[name] = TimerData(name, self)

        return td

    def full_name(self):
        'dotted name including the ancestors'

        return self.name if self.parent is None else self.parent.full_name() + "." + self.name

    def walk(self):
        'yield this timer and all its descendants, parents first'

        yield self

        for child in self.children.values():
            yield from child.walk()

class Timers():
    '''
    a static class for timer measurements

    tic() and toc() calls must be properly nested; callers pair them with try / finally so that an
    exception does not leave timers running
    '''

    top_level_timer = None

    stack = [] # running timers, outermost first

    def __init__(self):
        raise RuntimeError('Timers is a static class; should not be instantiated')

    @staticmethod
    def reset():
        'forget all timers'

        Timers.top_level_timer = None
        Timers.stack = []

    @staticmethod
    def tic(name):
        'start a timer, nested in the currently-running one'

        if Timers.stack:
            td = Timers.stack[-1].child(name)
        else:
            if Timers.top_level_timer is None or Timers.top_level_timer.name != name:
                Timers.top_level_timer = TimerData(name)

            td = Timers.top_level_timer

        td.num_calls += 1
        td.start_time = time.perf_counter()
        Timers.stack.append(td)

    @staticmethod
    def toc(name):
        'stop the most recently started timer, which should have the given name'

        assert Timers.stack, "toc({}) called with no running timers".format(name)

        td = Timers.stack[-1]
        assert td.name == name, "toc({}) called while timer {} is running".format(name, td.full_name())

        td.total_secs += time.perf_counter() - td.start_time
        td.start_time = None
        Timers.stack.pop()

    @staticmethod
    def get_stats():
        'get a dict mapping full timer name -> (num_calls, total_secs), empty after reset()'

        top = Timers.top_level_timer

        if top is None:
            return {}

        return {td.full_name(): (td.num_calls, td.total_secs) for td in top.walk()}

    @staticmethod
    def print_stats():
        'print the timer tree to stdout, small entries in grey and large ones in bold'

        top = Timers.top_level_timer

        if top is None:
            return

        assert not Timers.stack, "print_stats() called while timers are running"

        for td in top.walk():
            depth = td.full_name().count(".")
            line = "{}{} Time ({} calls): {:.4f} sec".format("  " * depth, td.name.capitalize(), td.num_calls,
                                                           td.total_secs)

            if td.parent is not None and td.parent.total_secs > 0:
                line += " ({:.1f}%)".format(100 * td.total_secs / td.parent.total_secs)

            percent = 100 * td.total_secs / top.total_secs if top.total_secs > 0 else 100

            if percent < 5:
                cprint(line, 'grey')
            elif percent > 50:
                cprint(line, None, attrs=['bold'])
            else:
                cprint(line)
