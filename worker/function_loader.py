"""
Dynamic Function Loader for MapReduce Job Files
Loads a job module and returns the stages it defines
"""

import importlib.util
import os
import sys

from common.errors import JobDefinitionError
from common.stage import Stage


class FunctionLoader:
    """Dynamically loads job definitions from Python files"""

    def __init__(self, job_file: str):
        """
        Initialize the function loader

        Args:
            job_file: Path to a Python file defining either
                stages(broadcast) or map_function/reduce_function
        """
        self.job_file = job_file
        self.module = None

    def load_module(self):
        """
        Dynamically load the job module

        Returns:
            The loaded module object

        Raises:
            FileNotFoundError: If the job file doesn't exist
        """
        if not os.path.exists(self.job_file):
            raise FileNotFoundError(f"Job file not found: {self.job_file}")

        module_name = f"job_{os.path.splitext(os.path.basename(self.job_file))[0]}"
        spec = importlib.util.spec_from_file_location(module_name, self.job_file)
        if spec is None or spec.loader is None:
            raise JobDefinitionError(f"Failed to load job file: {self.job_file}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
        self.module = module
        return module

    def get_map_function(self):
        """
        Get map function from loaded module

        Raises:
            JobDefinitionError: If module doesn't define 'map_function'
        """
        if not self.module:
            self.load_module()

        if not hasattr(self.module, 'map_function'):
            raise JobDefinitionError("Module must define 'map_function'")
        return self.module.map_function

    def get_reduce_function(self):
        """
        Get reduce function from loaded module

        Raises:
            JobDefinitionError: If module doesn't define 'reduce_function'
        """
        if not self.module:
            self.load_module()

        if not hasattr(self.module, 'reduce_function'):
            raise JobDefinitionError("Module must define 'reduce_function'")
        return self.module.reduce_function

    def get_combiner_function(self):
        """
        Get combiner function from loaded module

        Returns:
            The combiner_function callable, or None
        """
        if not self.module:
            self.load_module()

        return getattr(self.module, 'combiner_function', None)

    def get_stages(self, broadcast=None) -> list:
        """
        Get the job's stages in execution order

        A module defining stages(broadcast) is a multi-stage job and gets the
        broadcast handle. Otherwise the module's map/reduce/combiner functions
        form a single stage.

        Raises:
            JobDefinitionError: If the module defines no usable stages
        """
        if not self.module:
            self.load_module()

        if hasattr(self.module, 'stages'):
            stages = list(self.module.stages(broadcast))
            if not stages:
                raise JobDefinitionError(f"Job file {self.job_file} defines no stages")
            for stage in stages:
                if not isinstance(stage, Stage):
                    raise JobDefinitionError(f"stages() must return Stage objects, got {type(stage).__name__}")
            names = [stage.name for stage in stages]
            if len(set(names)) != len(names):
                raise JobDefinitionError(f"Stage names must be unique: {names}")
            return stages

        return [Stage(
            name='main',
            map_function=self.get_map_function(),
            reduce_function=self.get_reduce_function(),
            combiner_function=self.get_combiner_function()
        )]
